"""Setup wizard and its helpers.

This module contains the interactive configuration flow:
- wizard: Step-by-step .env configuration
- prompts: Numeric, yes/no, free-text and port prompts
- env_detector: Detection of composer, php, git, gh and npm
"""

from larinit.setup.env_detector import DetectionResult, ToolInfo, detect_tools, ensure_required_tools
from larinit.setup.prompts import Prompter
from larinit.setup.wizard import ProjectConfig, SetupWizard, WizardResult, format_summary

__all__ = [
    # Wizard
    "ProjectConfig",
    "SetupWizard",
    "WizardResult",
    "format_summary",
    # Prompts
    "Prompter",
    # Environment detection
    "DetectionResult",
    "ToolInfo",
    "detect_tools",
    "ensure_required_tools",
]
