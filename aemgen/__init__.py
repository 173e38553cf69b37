"""aemgen -- scaffolding for multi-module AEM Maven projects."""

__version__ = "0.1.0"
