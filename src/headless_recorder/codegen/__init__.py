"""
Codegen Module - Generate automation scripts from recorded events.
"""

from headless_recorder.codegen.generator import (
    CodeGenerator,
    GeneratedCode,
    PlaywrightGenerator,
    PuppeteerGenerator,
)

__all__ = [
    "CodeGenerator",
    "GeneratedCode",
    "PlaywrightGenerator",
    "PuppeteerGenerator",
]
