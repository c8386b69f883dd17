"""
Pydantic Models and Schemas
===========================

Value objects shared by the smoke test components. All of them are frozen:
each one is created by a single owner and only read afterwards.
"""

from typing import Optional, Tuple, Dict, Any
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class CompressionPolicy(str, Enum):
    """How the script route chooses its content-encoding."""
    ALWAYS = "always"
    NEGOTIATE = "negotiate"


class CertificateBundle(BaseModel):
    """PEM encoded private key and self-signed certificate."""
    model_config = ConfigDict(frozen=True)

    key: bytes = Field(..., description="PEM encoded RSA private key")
    cert: bytes = Field(..., description="PEM encoded X.509 certificate")


class LaunchConfiguration(BaseModel):
    """How to start one browser instance."""
    model_config = ConfigDict(frozen=True)

    headless: bool = Field(default=True, description="Run without a visible window")
    args: Tuple[str, ...] = Field(default=(), description="Extra browser command line arguments")

    def launch_options(self) -> Dict[str, Any]:
        """Keyword arguments for ``BrowserType.launch``."""
        return {"headless": self.headless, "args": list(self.args)}


class ScenarioResult(BaseModel):
    """Outcome of one page load and body comparison."""
    model_config = ConfigDict(frozen=True)

    url: str
    rendered: str
    expected: str
    headless: Optional[bool] = None

    @property
    def passed(self) -> bool:
        return self.rendered == self.expected
