from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import List, Tuple

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from vulnrisk_cli.models.vulnerability import RiskVector
from vulnrisk_cli.owasp import calculate_owasp_risk_values

TEMPLATE_BASENAME = "Template_Vulnerability_Management"
TEMPLATE_SHEET = "Template"

# (header, column width in characters)
TEMPLATE_COLUMNS: Tuple[Tuple[str, int], ...] = (
    ("No.", 8),
    ("Nama Kerentanan", 35),
    ("MSTG /WSTG", 15),
    ("Jalur lokasi terdampak", 20),
    ("OWASP Risk Rating", 60),
    ("Objek terdampak", 15),
    ("KI", 8),
    ("DI", 8),
    ("RI", 8),
    ("Deskripsi", 50),
    ("Rekomendasi/Mitigasi", 50),
    ("PJ", 15),
    ("Tenggat", 18),
    ("Status Mitigasi", 18),
    ("Keterangan remediasi", 25),
    ("New Endpoint", 15),
    ("KR", 8),
    ("DR", 8),
    ("RR", 8),
    ("Keterangan Retest", 30),
    ("Retest #1", 12),
    ("Klasifikasi Temuan", 20),
    ("Retest #2", 12),
)

EXAMPLE_VECTOR = RiskVector.from_keys({
    "SL": 2, "M": 3, "O": 3, "S": 3,
    "ED": 7, "EE": 5, "A": 3, "ID": 7,
    "LC": 1, "LI": 1, "LAV": 1, "LAC": 1,
    "FD": 1, "RD": 2, "NC": 1, "PV": 1,
})


def template_headers() -> List[str]:
    return [header for header, _ in TEMPLATE_COLUMNS]


def example_row() -> List[str]:
    # KI/DI/RI follow from the example vector.
    values = calculate_owasp_risk_values(EXAMPLE_VECTOR)
    return [
        "TE-01",
        "HSTS Header not implemented",
        "CONF-07",
        "Objek#1",
        EXAMPLE_VECTOR.to_vector_string(),
        "Web",
        values.ki,
        values.di,
        values.ri,
        "HSTS (HTTP Strict Transport Security) adalah mekanisme keamanan berbasis header "
        "HTTP yang memastikan komunikasi antara browser dan server hanya menggunakan HTTPS. "
        "Tanpa HSTS, pengguna rentan terhadap serangan SSL stripping, downgrade ke HTTP, "
        "dan Man-in-the-Middle (MITM).",
        "1. Tambahkan header HSTS dengan max-age=31536000 (1 tahun) pada konfigurasi server.\n"
        "2. Aktifkan redirect otomatis ke HTTPS untuk memastikan semua koneksi aman.\n"
        "3. Pastikan HSTS diaktifkan pada semua subdomain menggunakan includeSubDomains.",
        "Infra",
        "20 Desember 2024",
        "Menerapkan HSTS Header",
        "Selesai tanpa kendala",
        "Tidak ada",
        "None",
        "None",
        "None",
        "Sudah menerapkan HSTS Header",
        "Closed",
        "",
        "",
    ]


def generate_csv_template() -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=";", quotechar='"', lineterminator="\n")
    writer.writerow(template_headers())
    writer.writerow(example_row())
    return buffer.getvalue()


def write_csv_template(path: Path) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(generate_csv_template())


def write_excel_template(path: Path) -> None:
    wb = Workbook()
    ws = wb.active
    ws.title = TEMPLATE_SHEET

    ws.append(template_headers())
    ws.append(example_row())

    for cell in ws[1]:
        cell.font = Font(bold=True)
    for position, (_, width) in enumerate(TEMPLATE_COLUMNS, start=1):
        ws.column_dimensions[get_column_letter(position)].width = width

    wb.save(path)
