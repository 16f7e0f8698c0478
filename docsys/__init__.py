"""Core package for the local-first document editor.

The persistence and sharing engine lives in :mod:`docsys.storage`,
:mod:`docsys.documents` and :mod:`docsys.sharing`; the CLI, web API,
exporters and assistant are thin layers around it.
"""

__all__: list[str] = []
