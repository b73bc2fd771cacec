"""
Base Job Class for the Schema Sampler

Jobs wrap a unit of work with a consistent interface, error handling and
execution summary logging.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from dataclasses import dataclass
from enum import Enum


class JobStatus(Enum):
    """Job execution status"""
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class JobResult:
    """Standardized job result"""
    job_name: str
    status: JobStatus
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_seconds: Optional[float] = None
    collections_visited: int = 0
    documents_sampled: int = 0
    fields_observed: int = 0
    error_message: Optional[str] = None
    error: Optional[BaseException] = None
    metadata: Dict[str, Any] = None

    def __post_init__(self):
        if self.metadata is None:
            self.metadata = {}

        if self.end_time and self.start_time:
            self.duration_seconds = (self.end_time - self.start_time).total_seconds()

    @property
    def success(self) -> bool:
        return self.status == JobStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        """Convert JobResult to dictionary for serialization"""
        return {
            'job_name': self.job_name,
            'status': self.status.value,
            'start_time': self.start_time.isoformat() if self.start_time else None,
            'end_time': self.end_time.isoformat() if self.end_time else None,
            'duration_seconds': self.duration_seconds,
            'collections_visited': self.collections_visited,
            'documents_sampled': self.documents_sampled,
            'fields_observed': self.fields_observed,
            'error_message': self.error_message,
            'metadata': self.metadata,
            'success': self.success
        }


class BaseJob(ABC):
    """
    Abstract base class for sampler jobs.

    Provides:
    - Consistent logging and error handling
    - Job execution tracking
    - Result standardization
    """

    def __init__(self, job_name: str, config: Dict[str, Any] = None):
        """
        Initialize the job.

        Args:
            job_name: Unique name for this job
            config: Job-specific configuration
        """
        self.job_name = job_name
        self.config = config or {}
        self.logger = logging.getLogger(f"schema_sampler.{job_name}")

    def execute(self, **kwargs) -> JobResult:
        """
        Execute the job with error handling and monitoring.

        A failure inside the job does not propagate; it is reported through
        the returned JobResult with status FAILED.

        Args:
            **kwargs: Job-specific arguments

        Returns:
            JobResult with execution details
        """
        start_time = datetime.now(timezone.utc)
        result = JobResult(
            job_name=self.job_name,
            status=JobStatus.RUNNING,
            start_time=start_time
        )

        self.logger.info(f"Starting job: {self.job_name}")

        try:
            self._validate_prerequisites()

            job_data = self._execute_job(**kwargs)

            result.status = JobStatus.SUCCESS
            result.collections_visited = job_data.get('collections_visited', 0)
            result.documents_sampled = job_data.get('documents_sampled', 0)
            result.fields_observed = job_data.get('fields_observed', 0)
            result.metadata = job_data.get('metadata', {})

            self.logger.info(f"Job completed successfully: {self.job_name}")

        except Exception as e:
            result.status = JobStatus.FAILED
            result.error_message = str(e)
            result.error = e
            self.logger.error(f"Job failed: {self.job_name} - {e}", exc_info=True)

        finally:
            result.end_time = datetime.now(timezone.utc)
            result.duration_seconds = (result.end_time - result.start_time).total_seconds()

            self._log_execution_summary(result)

        return result

    @abstractmethod
    def _execute_job(self, **kwargs) -> Dict[str, Any]:
        """
        Main job execution logic - must be implemented by subclasses.

        Returns:
            Dict containing:
            - collections_visited: Number of collection paths sampled
            - documents_sampled: Number of documents fetched
            - fields_observed: Number of distinct field paths recorded
            - metadata: Additional job-specific data
        """
        pass

    def _validate_prerequisites(self):
        """
        Validate job prerequisites before execution.
        Override in subclasses for job-specific validation.
        """
        pass

    def _log_execution_summary(self, result: JobResult):
        """Log a summary of job execution"""
        self.logger.info(f"Job Summary - {self.job_name}:")
        self.logger.info(f"  Status: {result.status.value}")
        self.logger.info(f"  Duration: {result.duration_seconds:.2f}s")
        self.logger.info(f"  Collections: {result.collections_visited}")
        self.logger.info(f"  Documents: {result.documents_sampled}")
        self.logger.info(f"  Fields: {result.fields_observed}")

        if result.error_message:
            self.logger.error(f"  Error: {result.error_message}")
