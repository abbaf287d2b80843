import io
import logging

import pandas as pd
from django.http import HttpResponse
from django.utils import timezone
from rest_framework.decorators import action
from rest_framework.renderers import JSONRenderer

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def dataframe_response(df, filename, fmt='csv'):
    """Serialize a DataFrame as a CSV or XLSX attachment."""
    if fmt == 'xlsx':
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            df.to_excel(writer, index=False)
        buffer.seek(0)
        response = HttpResponse(buffer.read(), content_type=XLSX_CONTENT_TYPE)
        response['Content-Disposition'] = f'attachment; filename="{filename}.xlsx"'
    else:
        response = HttpResponse(content_type='text/csv')
        response['Content-Disposition'] = f'attachment; filename="{filename}.csv"'
        df.to_csv(response, index=False)
    return response


class ExportMixin:
    """
    Mixin to add CSV / Excel export to ViewSets.
    Requires serializer_class to be set.
    """

    export_filename = 'export'

    def get_export_serializer_class(self):
        """Return serializer class used for export. Defaults to serializer_class."""
        return self.get_serializer_class()

    def get_export_dataframe(self, queryset):
        serializer_class = self.get_export_serializer_class()
        data = serializer_class(queryset, many=True, context=self.get_serializer_context()).data
        if not data:
            # empty frame still carries the headers
            return pd.DataFrame(columns=list(serializer_class().fields.keys()))
        return pd.DataFrame(data)

    @action(detail=False, methods=['get'], url_path='export', renderer_classes=[JSONRenderer])
    def export(self, request):
        """Export data to CSV/Excel."""
        queryset = self.filter_queryset(self.get_queryset())
        df = self.get_export_dataframe(queryset)

        fmt = request.query_params.get('export_format', 'csv')
        timestamp = timezone.now().strftime('%Y%m%d_%H%M%S')
        logger.info("Exporting %s rows as %s", len(df.index), fmt)
        return dataframe_response(df, f"{self.export_filename}_{timestamp}", fmt)
