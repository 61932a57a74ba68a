"""
Projects Module (``labor_modules.projects``).

Projects, payroll uploads and stored time entries.  ``ProjectService``
(in ``labor_modules.projects.service``) owns every write.
"""

from labor_modules.projects.models import Project, ProjectDraft, StoredTimeEntry, Upload

__all__ = ["Project", "ProjectDraft", "StoredTimeEntry", "Upload"]
