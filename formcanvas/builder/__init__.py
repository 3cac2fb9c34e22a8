"""Form builder session: the single owner of the current snapshot.

Example:
    >>> from formcanvas.builder import FormBuilder
    >>> builder = FormBuilder.open()
    >>> builder.add_section("Payment")
    >>> builder.save()
"""

from .lib import FormBuilder

__all__ = ["FormBuilder"]
