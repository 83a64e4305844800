"""
Service d'export Excel du rapport VGP / VGP report Excel export service.
Rendu d'un ReportDocument deja compile ; aucune regle metier ici.
"""

import io

from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from vgp_inspect.services.report_builder import ReportDocument


class ExportService:
    """Rendu du rapport en XLSX / Report rendering to XLSX."""

    @staticmethod
    def _bold(ws: Worksheet, row: int, column: int, value) -> None:
        cell = ws.cell(row=row, column=column, value=value)
        cell.font = cell.font.copy(bold=True)

    @staticmethod
    def report_to_xlsx(document: ReportDocument) -> bytes:
        """Generer le classeur du rapport / Generate the report workbook."""
        wb = Workbook()
        ws = wb.active
        ws.title = "Rapport"

        ExportService._bold(ws, 1, 1, f"Rapport VGP {document.report_number}")
        if document.is_draft:
            ws.cell(row=1, column=3, value="BROUILLON")
        ws.cell(row=2, column=1, value=f"Généré le {document.generated_at}")

        # En-tete / Header
        row = 4
        for label, value in document.header.items():
            ws.cell(row=row, column=1, value=label)
            ws.cell(row=row, column=2, value=value)
            row += 1

        row += 1
        ExportService._bold(ws, row, 1, "Épreuve dynamique (kg)")
        ws.cell(row=row, column=2, value=document.test_loads.dynamic)
        ws.cell(row=row, column=3, value=f"x {document.test_loads.dynamic_coefficient}")
        row += 1
        ExportService._bold(ws, row, 1, "Épreuve statique (kg)")
        ws.cell(row=row, column=2, value=document.test_loads.static)
        ws.cell(row=row, column=3, value=f"x {document.test_loads.static_coefficient}")
        row += 2

        # Points de controle / Check items
        for section in document.sections:
            ExportService._bold(ws, row, 1, section.title)
            row += 1
            for col, title in enumerate(("Point de contrôle", "Résultat", "Observations"), 1):
                ExportService._bold(ws, row, col, title)
            row += 1
            for line in section.lines:
                ws.cell(row=row, column=1, value=line.label + (" *" if line.required else ""))
                ws.cell(row=row, column=2, value=line.symbol)
                ws.cell(row=row, column=3, value=line.note)
                row += 1
            row += 1

        # Conclusion
        ExportService._bold(ws, row, 1, "Avis")
        ws.cell(row=row, column=2, value=document.verdict_text)
        row += 1
        ws.cell(row=row, column=1, value="Réserves")
        ws.cell(row=row, column=2, value=document.reservation_count)
        row += 1
        ws.cell(row=row, column=1, value="Non-conformités bloquantes")
        ws.cell(row=row, column=2, value=document.blocking_count)
        row += 1
        ws.cell(row=row, column=1, value="Actions correctives")
        ws.cell(row=row, column=2, value=document.corrective_actions)
        row += 1
        ws.cell(row=row, column=1, value="Observations")
        ws.cell(row=row, column=2, value=document.observations or "−")
        for note in document.reservation_notes:
            row += 1
            ws.cell(row=row, column=2, value=f"• {note}")

        if document.photos:
            annex = wb.create_sheet("Annexe photos")
            ExportService._bold(annex, 1, 1, f"ANNEXE PHOTOGRAPHIQUE ({len(document.photos)})")
            for i, photo in enumerate(document.photos, 2):
                annex.cell(row=i, column=1, value=photo.caption)

        ws.column_dimensions["A"].width = 55
        ws.column_dimensions["B"].width = 30
        ws.column_dimensions["C"].width = 45

        buf = io.BytesIO()
        wb.save(buf)
        return buf.getvalue()
