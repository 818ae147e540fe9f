"""UI components and page assemblies for the internship portal."""

from . import components, pages

__all__ = ["components", "pages"]
