"""Versioned prompt text sent alongside every image.

The wording directly affects output quality, so it lives here as data rather
than being assembled inline by the client. A deployment can swap it out with
``SNAPSHEET_PROMPT_FILE``; the file holds the base instructions, optionally
followed by a ``---columns---`` line and the fixed-column clause. The clause
may use ``{columns}`` where the JSON list of column names belongs.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

PROMPT_VERSION = "2024-11-receipts-v1"
COLUMNS_MARKER = "---columns---"

BASE_INSTRUCTIONS = """\
Analyze the provided image. It contains data such as a receipt, invoice, business card, or a table.
Extract the key information into a flat JSON object (key-value pairs).

Rules:
1. Keys should be clean, readable headers.
2. Values should be the extracted text.
3. Format dates as YYYY-MM-DD if possible.
4. Format currency as simple numbers (e.g., 10.50) where possible, or keep the symbol if ambiguous.
5. CRITICAL: Remove the string "RC", "RewardCash", "$", "HKD" or any currency codes from numeric values. Return only the number.
6. Return ONLY the raw JSON object. Do not include Markdown formatting or conversational text.
"""

COLUMNS_CLAUSE = """\
CRITICAL: The user has already established a table with the following headers:
{columns}

You MUST map the extracted data to these EXACT keys.
Do NOT create new keys.
If a specific category is not found in the image, set the value to null or empty string.
"""


@dataclass(frozen=True)
class PromptTemplate:
    """Instruction text plus the clause used when a column set is active."""

    base: str = BASE_INSTRUCTIONS
    columns_clause: str = COLUMNS_CLAUSE
    version: str = PROMPT_VERSION

    def render(self, columns: Optional[Sequence[str]] = None) -> str:
        prompt = self.base.strip()
        if columns:
            clause = self.columns_clause.replace(
                "{columns}", json.dumps(list(columns), ensure_ascii=False)
            )
            prompt = f"{prompt}\n\n{clause.strip()}"
        return prompt


def load_prompt_template(path: Optional[Path] = None) -> PromptTemplate:
    """Return the built-in template, or one read from ``path``."""

    if path is None:
        return PromptTemplate()

    text = path.read_text(encoding="utf-8")
    base, marker, clause = text.partition(COLUMNS_MARKER)
    return PromptTemplate(
        base=base,
        columns_clause=clause if marker else COLUMNS_CLAUSE,
        version=f"file:{path.name}",
    )
