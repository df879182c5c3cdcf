# Models module
from .job import JobModel, JobStatusEnum, UrlStatusEnum, UrlStatusModel

__all__ = ["JobModel", "JobStatusEnum", "UrlStatusEnum", "UrlStatusModel"]
