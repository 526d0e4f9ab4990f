"""
SQLAlchemy ORM models -- the marketplace tables this API reads.

Tables
------
users              -- accounts issued by the identity provider (role, status)
profiles           -- personal profile (youth skills, interests, city)
companies          -- employer companies
job_offers         -- job postings published by companies
courses            -- courses offered by institutions
entrepreneurships  -- startups / entrepreneurship records

The tables are written by the CRUD services of the platform; this API only
reads them.
"""

from __future__ import annotations

import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


# Roles issued by the identity provider
ROLE_YOUTH = "YOUTH"
ROLE_ADOLESCENTS = "ADOLESCENTS"
ROLE_COMPANIES = "COMPANIES"
ROLE_INSTITUTION = "INSTITUTION"
ROLE_INSTRUCTOR = "INSTRUCTOR"
ROLE_SUPERADMIN = "SUPERADMIN"

BUSINESS_STAGES = ("IDEA", "STARTUP", "GROWING", "ESTABLISHED")

# ---------------------------------------------------------------------------
# Users & profiles
# ---------------------------------------------------------------------------

class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), unique=True, nullable=False)
    role = Column(String(32), nullable=False, default=ROLE_YOUTH, index=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=func.now())

    profile = relationship("Profile", back_populates="user", uselist=False)
    entrepreneurships = relationship("Entrepreneurship", back_populates="owner")


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), unique=True, nullable=False)
    first_name = Column(String(128), default="")
    last_name = Column(String(128), default="")
    avatar_url = Column(String(512), nullable=True)
    job_title = Column(String(255), nullable=True)
    professional_summary = Column(Text, nullable=True)
    city = Column(String(128), nullable=True)
    relevant_skills = Column(JSON, default=list)
    skills = Column(JSON, default=list)
    interests = Column(JSON, default=list)
    created_at = Column(DateTime, default=func.now())

    user = relationship("User", back_populates="profile")


# ---------------------------------------------------------------------------
# Companies & job offers
# ---------------------------------------------------------------------------

class Company(Base):
    __tablename__ = "companies"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    business_sector = Column(String(255), nullable=True)
    address = Column(String(512), nullable=True)
    website = Column(String(512), nullable=True)
    logo_url = Column(String(512), nullable=True)
    company_size = Column(String(32), nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=func.now())

    job_offers = relationship("JobOffer", back_populates="company")


class JobOffer(Base):
    __tablename__ = "job_offers"

    id = Column(String(36), primary_key=True, default=_uuid)
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, default="")
    requirements = Column(Text, nullable=True)
    benefits = Column(Text, nullable=True)
    location = Column(String(255), default="")
    contract_type = Column(String(32), nullable=True)  # FULL_TIME, PART_TIME, INTERNSHIP...
    work_modality = Column(String(32), nullable=True)  # ON_SITE, REMOTE, HYBRID
    salary_min = Column(Integer, nullable=True)
    salary_max = Column(Integer, nullable=True)
    salary_currency = Column(String(8), nullable=True)
    skills_required = Column(JSON, default=list)
    experience_level = Column(String(32), nullable=True)
    education_required = Column(String(64), nullable=True)
    application_deadline = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, index=True)
    featured = Column(Boolean, default=False)
    views_count = Column(Integer, default=0)
    applications_count = Column(Integer, default=0)
    created_at = Column(DateTime, default=func.now())

    company = relationship("Company", back_populates="job_offers")


# ---------------------------------------------------------------------------
# Courses
# ---------------------------------------------------------------------------

class Course(Base):
    __tablename__ = "courses"

    id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(String(255), nullable=False)
    description = Column(Text, default="")
    institution_name = Column(String(255), nullable=True)
    category = Column(String(64), nullable=True)
    level = Column(String(32), nullable=True)
    duration = Column(Integer, nullable=True)  # hours
    tags = Column(JSON, default=list)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=func.now())


# ---------------------------------------------------------------------------
# Entrepreneurships (startups)
# ---------------------------------------------------------------------------

class Entrepreneurship(Base):
    __tablename__ = "entrepreneurships"

    id = Column(String(36), primary_key=True, default=_uuid)
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, default="")
    category = Column(String(128), nullable=False, index=True)
    subcategory = Column(String(128), nullable=True)
    business_stage = Column(String(32), nullable=False, default="IDEA")
    business_model = Column(Text, nullable=True)
    target_market = Column(Text, nullable=True)
    logo = Column(String(512), nullable=True)
    website = Column(String(512), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(64), nullable=True)
    address = Column(String(512), nullable=True)
    municipality = Column(String(128), nullable=False, default="")
    department = Column(String(128), nullable=False, default="Cochabamba")
    social_media = Column(JSON(none_as_null=True), nullable=True)
    founded = Column(Date, nullable=True)
    employees = Column(Integer, nullable=True)
    annual_revenue = Column(Float, nullable=True)
    is_public = Column(Boolean, default=True)
    is_active = Column(Boolean, default=True)
    views_count = Column(Integer, default=0)
    rating = Column(Float, nullable=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    owner = relationship("User", back_populates="entrepreneurships")

    __table_args__ = (
        Index("ix_entrepreneurships_visibility", "is_active", "is_public"),
    )
