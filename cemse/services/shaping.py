"""
Maps ORM records to the JSON objects the client consumes.

Storage names are renamed to client names (``address`` -> ``location``),
composite fields are derived (``salary``) and join-only foreign keys are
dropped. Relationships used here must be eager-loaded by the caller.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional

DEFAULT_CURRENCY = "BOB"


def _iso(value) -> Optional[str]:
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    return value


def shape_owner(user) -> Optional[dict]:
    if user is None:
        return None
    profile = user.profile
    return {
        "id": user.id,
        "firstName": profile.first_name if profile else "",
        "lastName": profile.last_name if profile else "",
        "avatarUrl": profile.avatar_url if profile else None,
    }


def shape_startup(startup, **extra) -> dict:
    data = {
        "id": startup.id,
        "name": startup.name,
        "description": startup.description,
        "category": startup.category,
        "subcategory": startup.subcategory,
        "businessStage": startup.business_stage,
        "businessModel": startup.business_model,
        "targetMarket": startup.target_market,
        "logo": startup.logo,
        "website": startup.website,
        "email": startup.email,
        "phone": startup.phone,
        "address": startup.address,
        "municipality": startup.municipality,
        "department": startup.department,
        "socialMedia": startup.social_media,
        "founded": _iso(startup.founded),
        "employees": startup.employees,
        "annualRevenue": startup.annual_revenue,
        "isPublic": startup.is_public,
        "isActive": startup.is_active,
        "viewsCount": startup.views_count or 0,
        "rating": startup.rating,
        "createdAt": _iso(startup.created_at),
        "updatedAt": _iso(startup.updated_at),
        "owner": shape_owner(startup.owner),
    }
    data.update(extra)
    return data


def shape_salary(job) -> Optional[dict]:
    """Nested salary object, only when both bounds are set."""
    if job.salary_min is None or job.salary_max is None:
        return None
    return {
        "min": job.salary_min,
        "max": job.salary_max,
        "currency": job.salary_currency or DEFAULT_CURRENCY,
    }


def shape_company(company) -> dict:
    return {
        "id": company.id,
        "name": company.name,
        "description": company.description,
        "sector": company.business_sector,
        "location": company.address,
        "website": company.website,
        "logo": company.logo_url,
        "size": company.company_size,
        "createdAt": _iso(company.created_at),
    }


def shape_job(job) -> dict:
    company = job.company
    data = {
        "id": job.id,
        "title": job.title,
        "description": job.description,
        "location": job.location,
        "type": job.contract_type,
        "workModality": job.work_modality,
        "remote": job.work_modality in ("REMOTE", "HYBRID"),
        "requirements": [job.requirements] if job.requirements else [],
        "benefits": [job.benefits] if job.benefits else [],
        "skills": list(job.skills_required or []),
        "experience": job.experience_level,
        "education": job.education_required,
        "deadline": _iso(job.application_deadline),
        "urgent": bool(job.featured),
        "totalViews": job.views_count or 0,
        "totalApplications": job.applications_count or 0,
        "createdAt": _iso(job.created_at),
        "company": None,
    }
    if company is not None:
        data["company"] = {
            "id": company.id,
            "name": company.name,
            "logo": company.logo_url,
            "location": company.address,
            "website": company.website,
        }
    salary = shape_salary(job)
    if salary is not None:
        data["salary"] = salary
    return data


def shape_person(profile) -> dict:
    return {
        "id": profile.user_id,
        "firstName": profile.first_name,
        "lastName": profile.last_name,
        "name": full_name(profile),
        "avatarUrl": profile.avatar_url,
        "jobTitle": profile.job_title,
        "skills": list(profile.relevant_skills or []),
        "location": profile.city,
        "createdAt": _iso(profile.created_at),
    }


def shape_course(course) -> dict:
    return {
        "id": course.id,
        "title": course.title,
        "description": course.description,
        "institution": course.institution_name,
        "category": course.category,
        "level": course.level,
        "duration": course.duration,
        "tags": list(course.tags or []),
        "createdAt": _iso(course.created_at),
    }


def full_name(profile) -> str:
    return f"{profile.first_name or ''} {profile.last_name or ''}".strip()
