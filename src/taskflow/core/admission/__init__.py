"""Admission pipeline that gates requests before they reach route handlers."""

from taskflow.core.admission.pipeline import (
    Admission,
    AdmissionMiddleware,
    AdmissionPipeline,
    AdmissionStage,
    error_response,
)


__all__ = [
    "Admission",
    "AdmissionMiddleware",
    "AdmissionPipeline",
    "AdmissionStage",
    "error_response",
]
