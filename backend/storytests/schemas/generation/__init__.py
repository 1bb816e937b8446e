from .request import GenerationRequest, TestCategory, TestFormat
from .response import BDDTestCase, GenerationResponse, ManualTestCase, TestCase

__all__ = [
    "GenerationRequest",
    "TestCategory",
    "TestFormat",
    "GenerationResponse",
    "ManualTestCase",
    "BDDTestCase",
    "TestCase",
]
