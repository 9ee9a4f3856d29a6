"""SQLAdmin model views for database browsing (dev-only).

Registered when ``phraseboard serve --dev`` is active.  Provides a CRUD
admin panel at ``/admin/`` for transcripts and analyses.
"""

from __future__ import annotations

from sqladmin import Admin, ModelView

from phraseboard.server.models import Analysis, Transcript


class TranscriptAdmin(ModelView, model=Transcript):
    column_list = [Transcript.id, Transcript.file_name, Transcript.file_path,
                   Transcript.created_at]
    name = "Transcript"
    name_plural = "Transcripts"
    icon = "fa-solid fa-file-lines"


class AnalysisAdmin(ModelView, model=Analysis):
    column_list = [Analysis.id, Analysis.transcript_id, Analysis.summary, Analysis.created_at]
    column_searchable_list = [Analysis.summary]
    column_default_sort = [(Analysis.created_at, True)]
    name = "Analysis"
    name_plural = "Analyses"
    icon = "fa-solid fa-cloud"


def register_admin_views(admin: Admin) -> None:
    """Register every model view on *admin*."""
    admin.add_view(TranscriptAdmin)
    admin.add_view(AnalysisAdmin)
