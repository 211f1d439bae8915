"""URL configuration for core views."""

from __future__ import annotations

from django.urls import path

from core import views

app_name = "core"

urlpatterns = [
    path("api/chart-types/", views.chart_types_api, name="chart_types_api"),
    path("api/themes/", views.themes_api, name="themes_api"),
    path("api/styling-options/", views.styling_options_api, name="styling_options_api"),
    path("api/editor/", views.editor_api, name="editor_api"),
    path("api/editor/chart-type/", views.select_chart_type_api, name="select_chart_type_api"),
    path("api/editor/theme/", views.select_theme_api, name="select_theme_api"),
    path("api/editor/styling/", views.update_styling_api, name="update_styling_api"),
    path("api/editor/styling/reset/", views.reset_styling_api, name="reset_styling_api"),
    path("api/editor/columns/next/", views.next_column_api, name="next_column_api"),
    path("api/editor/columns/previous/", views.previous_column_api, name="previous_column_api"),
    path("api/editor/columns/select/", views.select_column_api, name="select_column_api"),
    path("api/editor/import/", views.import_dataset_api, name="import_dataset_api"),
    path("api/editor/dataset/", views.load_dataset_api, name="load_dataset_api"),
    path("api/editor/sample-data/", views.sample_data_api, name="sample_data_api"),
    path("sample-data.csv", views.sample_csv, name="sample_csv"),
]
