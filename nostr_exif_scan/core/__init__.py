"""Core scanning logic - models, extraction, classification and the pipeline."""

from .models import ImageReference, PostRecord, ScanResult, ScanSummary
from .classifier import SENSITIVE_FIELDS, SensitiveField, classify
from .extractor import extract_image_references
from .metadata import NoMetadataError, decode_metadata
from .pipeline import AdmissionGate, Console, ScanPipeline, scan

__all__ = [
    "ImageReference",
    "PostRecord",
    "ScanResult",
    "ScanSummary",
    "SENSITIVE_FIELDS",
    "SensitiveField",
    "classify",
    "extract_image_references",
    "NoMetadataError",
    "decode_metadata",
    "AdmissionGate",
    "Console",
    "ScanPipeline",
    "scan",
]
