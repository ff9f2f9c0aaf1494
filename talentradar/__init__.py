"""TalentRadar - job posting and leadership hire extraction from company pages."""

__version__ = "0.1.0"
