"""
Ingestion record schema. Raw JSON-like records are validated here before
entering the document store, so the core never handles untyped data.
"""

import math
import numbers
from typing import List, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr, field_validator

# Embeddings are stored as float32; anything larger would become inf
FLOAT32_MAX = float(np.finfo(np.float32).max)


class DocumentRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: StrictInt
    text: StrictStr
    embedding: Optional[List[float]] = None

    @field_validator('embedding', mode='before')
    @classmethod
    def embedding_must_be_numeric(cls, v):
        if v is None:
            return v
        if isinstance(v, (str, bytes, dict)):
            raise ValueError('embedding must be a flat sequence of numbers')
        try:
            values = list(v)
        except TypeError:
            raise ValueError('embedding must be a flat sequence of numbers')

        converted = []
        for value in values:
            # bool is an int subclass; reject it along with strings and nested lists
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ValueError('embedding must contain only numbers')
            try:
                number = float(value)
            except OverflowError:
                raise ValueError('embedding values must fit in float32')
            if not math.isfinite(number):
                raise ValueError('embedding values must be finite')
            if abs(number) > FLOAT32_MAX:
                raise ValueError('embedding values must fit in float32')
            converted.append(number)
        return converted

    @field_validator('embedding')
    @classmethod
    def embedding_must_not_be_empty(cls, v):
        if v is not None and len(v) == 0:
            raise ValueError('embedding cannot be empty')
        return v
