"""
Central constants for the CareerForge application.
"""
from __future__ import annotations

ROLE_STUDENT = "student"
ROLE_EDUCATOR = "educator"
ROLE_RECRUITER = "recruiter"

# A user may hold any subset of these.
ROLE_TAGS = (ROLE_STUDENT, ROLE_EDUCATOR, ROLE_RECRUITER)

COURSE_DIFFICULTIES = ("beginner", "intermediate", "advanced")
