"""Database models and connection management."""
from datetime import datetime
from typing import List, Optional
import logging

from sqlalchemy import create_engine, Column, Integer, String, DateTime, Boolean, Text, func
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.exc import SQLAlchemyError

from .models import Company, HireCandidate, JobCandidate, ScanSummary

logger = logging.getLogger(__name__)

Base = declarative_base()


class CompanyModel(Base):
    """SQLAlchemy model for scanned companies."""
    __tablename__ = 'companies'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    website = Column(String(512), nullable=True)
    linkedin_url = Column(String(512), nullable=True)
    career_page_url = Column(String(512), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class JobCandidateModel(Base):
    """SQLAlchemy model for accepted job candidates."""
    __tablename__ = 'job_candidates'

    id = Column(Integer, primary_key=True, autoincrement=True)
    dedup_key = Column(String(1024), nullable=False, unique=True, index=True)
    company = Column(String(255), nullable=False, index=True)
    title = Column(String(255), nullable=False, index=True)
    location = Column(String(255), nullable=True)
    department = Column(String(255), nullable=True)
    posted_date = Column(String(10), nullable=True)
    url = Column(String(1024), nullable=True)
    source_url = Column(String(1024), nullable=True)
    extraction_method = Column(String(20), nullable=True, index=True)
    raw_text = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class HireCandidateModel(Base):
    """SQLAlchemy model for accepted hire candidates."""
    __tablename__ = 'hire_candidates'

    id = Column(Integer, primary_key=True, autoincrement=True)
    dedup_key = Column(String(1024), nullable=False, unique=True, index=True)
    person_name = Column(String(255), nullable=False, index=True)
    company = Column(String(255), nullable=False, index=True)
    position = Column(String(255), nullable=False)
    source = Column(String(100), nullable=True)
    confidence_score = Column(Integer, default=0)
    start_date = Column(DateTime, nullable=True)
    previous_company = Column(String(255), nullable=True)
    linkedin_profile = Column(String(512), nullable=True)
    found_date = Column(DateTime, default=datetime.utcnow)
    verified = Column(Boolean, default=False)


class ScanSummaryModel(Base):
    """SQLAlchemy model for per-cycle scan summaries."""
    __tablename__ = 'scan_summaries'

    id = Column(Integer, primary_key=True, autoincrement=True)
    processed_count = Column(Integer, default=0)
    new_item_count = Column(Integer, default=0)
    error_count = Column(Integer, default=0)
    duration_ms = Column(Integer, default=0)
    jobs_found = Column(Integer, default=0)
    hires_found = Column(Integer, default=0)
    started_at = Column(DateTime, default=datetime.utcnow, index=True)


def job_key(job: JobCandidate) -> str:
    title, location = job.dedup_key()
    return "|".join((job.company.lower().strip(), title, location))


def hire_key(hire: HireCandidate) -> str:
    return "|".join(hire.dedup_key())


class Database:
    """Database connection and operation manager."""

    def __init__(self, db_url: str = "sqlite:///talentradar.db"):
        """Initialize database connection.

        Args:
            db_url: Database connection URL
        """
        self.engine = create_engine(db_url)
        self.Session = sessionmaker(bind=self.engine)
        self._create_tables()

    def _create_tables(self) -> None:
        """Create database tables if they don't exist."""
        Base.metadata.create_all(self.engine)

    def add_company(self, company: Company) -> bool:
        """Add or update a company.

        Returns:
            bool: True if the company was stored successfully
        """
        try:
            with self.Session() as session:
                existing = session.query(CompanyModel).filter_by(name=company.name).first()
                if existing:
                    existing.website = company.website
                    existing.linkedin_url = company.linkedin_url
                    existing.career_page_url = company.career_page_url
                else:
                    session.add(CompanyModel(
                        name=company.name,
                        website=company.website,
                        linkedin_url=company.linkedin_url,
                        career_page_url=company.career_page_url,
                    ))
                session.commit()
                return True
        except SQLAlchemyError as e:
            logger.error(f"Error adding company to database: {str(e)}")
            return False

    def list_companies(self) -> List[Company]:
        """All stored companies, in insertion order."""
        try:
            with self.Session() as session:
                rows = session.query(CompanyModel).order_by(CompanyModel.id).all()
                companies = []
                for row in rows:
                    try:
                        companies.append(Company(
                            name=row.name,
                            website=row.website or "",
                            linkedin_url=row.linkedin_url,
                            career_page_url=row.career_page_url,
                        ))
                    except ValueError as e:
                        logger.warning(f"Skipping invalid stored company {row.name!r}: {e}")
                return companies
        except SQLAlchemyError as e:
            logger.error(f"Error listing companies: {str(e)}")
            return []

    def add_jobs(self, jobs: List[JobCandidate]) -> int:
        """Insert jobs not already stored, in a single transaction.

        Args:
            jobs: Job candidates to store

        Returns:
            int: Number of jobs inserted
        """
        if not jobs:
            return 0
        try:
            with self.Session() as session:
                keys = [job_key(job) for job in jobs]
                existing = {
                    row[0] for row in
                    session.query(JobCandidateModel.dedup_key)
                    .filter(JobCandidateModel.dedup_key.in_(keys)).all()
                }
                added = 0
                for key, job in zip(keys, jobs):
                    if key in existing:
                        continue
                    existing.add(key)
                    session.add(JobCandidateModel(
                        dedup_key=key,
                        company=job.company,
                        title=job.title,
                        location=job.location,
                        department=job.department,
                        posted_date=job.posted_date,
                        url=job.url,
                        source_url=job.source_url,
                        extraction_method=job.extraction_method,
                        raw_text=job.raw_text,
                    ))
                    added += 1
                session.commit()
                return added
        except SQLAlchemyError as e:
            logger.error(f"Error adding jobs to database: {str(e)}")
            return 0

    def add_hires(self, hires: List[HireCandidate]) -> int:
        """Insert hires not already stored, in a single transaction.

        Returns:
            int: Number of hires inserted
        """
        if not hires:
            return 0
        try:
            with self.Session() as session:
                keys = [hire_key(hire) for hire in hires]
                existing = {
                    row[0] for row in
                    session.query(HireCandidateModel.dedup_key)
                    .filter(HireCandidateModel.dedup_key.in_(keys)).all()
                }
                added = 0
                for key, hire in zip(keys, hires):
                    if key in existing:
                        continue
                    existing.add(key)
                    session.add(HireCandidateModel(
                        dedup_key=key,
                        person_name=hire.person_name,
                        company=hire.company,
                        position=hire.position,
                        source=hire.source,
                        confidence_score=hire.confidence_score,
                        start_date=hire.start_date,
                        previous_company=hire.previous_company,
                        linkedin_profile=hire.linkedin_profile,
                        found_date=hire.found_date,
                        verified=hire.verified,
                    ))
                    added += 1
                session.commit()
                return added
        except SQLAlchemyError as e:
            logger.error(f"Error adding hires to database: {str(e)}")
            return 0

    def record_summary(self, summary: ScanSummary) -> bool:
        """Store a scan cycle summary."""
        try:
            with self.Session() as session:
                session.add(ScanSummaryModel(
                    processed_count=summary.processed_count,
                    new_item_count=summary.new_item_count,
                    error_count=summary.error_count,
                    duration_ms=summary.duration_ms,
                    jobs_found=summary.jobs_found,
                    hires_found=summary.hires_found,
                    started_at=summary.started_at,
                ))
                session.commit()
                return True
        except SQLAlchemyError as e:
            logger.error(f"Error recording scan summary: {str(e)}")
            return False

    def latest_summary(self) -> Optional[ScanSummary]:
        try:
            with self.Session() as session:
                row = session.query(ScanSummaryModel).order_by(ScanSummaryModel.id.desc()).first()
                if row is None:
                    return None
                return ScanSummary(
                    processed_count=row.processed_count,
                    new_item_count=row.new_item_count,
                    error_count=row.error_count,
                    duration_ms=row.duration_ms,
                    jobs_found=row.jobs_found,
                    hires_found=row.hires_found,
                    started_at=row.started_at,
                )
        except SQLAlchemyError as e:
            logger.error(f"Error reading scan summary: {str(e)}")
            return None

    def count_jobs(self, company: Optional[str] = None) -> int:
        try:
            with self.Session() as session:
                query = session.query(func.count(JobCandidateModel.id))
                if company:
                    query = query.filter(JobCandidateModel.company == company)
                return query.scalar() or 0
        except SQLAlchemyError as e:
            logger.error(f"Error counting jobs in database: {str(e)}")
            return 0

    def count_hires(self, company: Optional[str] = None) -> int:
        try:
            with self.Session() as session:
                query = session.query(func.count(HireCandidateModel.id))
                if company:
                    query = query.filter(HireCandidateModel.company == company)
                return query.scalar() or 0
        except SQLAlchemyError as e:
            logger.error(f"Error counting hires in database: {str(e)}")
            return 0
