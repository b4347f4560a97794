"""Inference Service client and LLM output validation."""

from autosentience.inference.client import InferenceClient, InferenceService
from autosentience.inference.validate import extract_json, validate_llm_output

__all__ = ["InferenceClient", "InferenceService", "extract_json", "validate_llm_output"]
