"""Model-backed extraction of records from document images."""
from snapsheet.extraction.client import ExtractionClient, backoff_delay, is_rate_limit_error
from snapsheet.extraction.parsing import conform_record, parse_model_text, strip_code_fence
from snapsheet.extraction.prompts import PromptTemplate, load_prompt_template

__all__ = [
    "ExtractionClient",
    "PromptTemplate",
    "backoff_delay",
    "conform_record",
    "is_rate_limit_error",
    "load_prompt_template",
    "parse_model_text",
    "strip_code_fence",
]
