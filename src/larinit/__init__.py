"""
larinit - interactive Laravel project installer.

Package structure:
- larinit.core: .env file store, database settings, input validation
- larinit.integrations: External commands and the port check
- larinit.setup: Setup wizard, prompts and tool detection
- larinit.installer: Installation pipeline behind ``larinit new``

Public API:
- set_key(): Update or append a KEY=VALUE line
- SetupWizard: Interactive .env configuration
- Installer: Full installation pipeline
"""

__version__ = "1.0.0"

from larinit.core.env_file import set_key
from larinit.installer import Installer
from larinit.setup.wizard import SetupWizard

__all__ = [
    "set_key",
    "SetupWizard",
    "Installer",
]
