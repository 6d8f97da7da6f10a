"""
Verification Module
Quality gate over research results and per-resource verification
"""
from .quality_gate import QualityVerificationGate, generate_verification_summary
from .resource_verifier import ResourceVerifier, assess_quality

__all__ = [
    "QualityVerificationGate",
    "generate_verification_summary",
    "ResourceVerifier",
    "assess_quality",
]
