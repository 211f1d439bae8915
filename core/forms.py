"""Forms for chart editor workflows."""

from __future__ import annotations

from django import forms
from django.conf import settings
from django.core.files.uploadedfile import UploadedFile

from core.parsers.table_file import SUPPORTED_EXTENSIONS, UNSUPPORTED_FILE_MESSAGE, is_supported_file


class DatasetUploadForm(forms.Form):
    """Validate an uploaded CSV or Excel table."""

    file = forms.FileField(
        label="Data file",
        help_text="CSV or Excel file: first column for labels, further columns for values.",
        widget=forms.ClearableFileInput(attrs={"accept": ",".join(SUPPORTED_EXTENSIONS)}),
    )

    def clean_file(self) -> UploadedFile:
        """Validate the upload's extension and size.

        Returns:
            The uploaded file.
        """

        upload = self.cleaned_data["file"]
        if not is_supported_file(upload.name or ""):
            raise forms.ValidationError(UNSUPPORTED_FILE_MESSAGE)
        max_bytes = int(getattr(settings, "CHARTS_MAX_UPLOAD_BYTES", 5 * 1024 * 1024))
        if upload.size is not None and upload.size > max_bytes:
            raise forms.ValidationError(f"File is too large (limit {max_bytes // 1024} KB).")
        return upload


class ColumnSelectionForm(forms.Form):
    """Validate a direct column selection request."""

    index = forms.IntegerField(label="Column index")
