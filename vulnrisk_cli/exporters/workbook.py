from __future__ import annotations

import re
import textwrap
from typing import Any, Dict, List, Set

from vulnrisk_cli.aggregator import effective_status
from vulnrisk_cli.exporters.base import BaseExporter
from vulnrisk_cli.formatters.markdown_formatter import MarkdownFormatter
from vulnrisk_cli.models.vulnerability import MitigationStatus, RiskLevel, Vulnerability
from vulnrisk_cli.models.workbook import WorkbookData
from vulnrisk_cli.owasp import calculate_owasp_risk_values
from vulnrisk_cli.risk import vector_average_level
from vulnrisk_cli.wstg import parse_mstg_wstg

_UNSAFE_STEM_RE = re.compile(r"[^A-Za-z0-9._-]+")

INDEX_NAME = "index"
DATA_NAME = "workbook"


class WorkbookExporter(BaseExporter):
    def export(self) -> None:
        self._ensure_output_dir()
        wb = self.workbook
        self._log(f"Exporting {wb.name}...")

        stems: List[str] = []
        used: Set[str] = set()
        for vuln in wb.vulnerabilities:
            stem = finding_stem(vuln.id, used)
            self._write_markdown(stem, render_finding(vuln))
            stems.append(stem)

        self._write_markdown(INDEX_NAME, render_index(wb, stems))
        self._write_data(DATA_NAME, wb)

        noun = "finding" if len(stems) == 1 else "findings"
        self._log(f"Exporting {wb.name}... done ({len(stems)} {noun})")


def finding_stem(finding_id: str, used: Set[str]) -> str:
    base = _UNSAFE_STEM_RE.sub("_", finding_id).strip("._") or "finding"
    if base == INDEX_NAME:
        base = f"{base}_"
    stem = base
    counter = 2
    while stem in used:
        stem = f"{base}-{counter}"
        counter += 1
    used.add(stem)
    return stem


def _level_text(level: RiskLevel) -> str:
    return f"{level.value} ({level.label_id})"


def _status_text(status: MitigationStatus) -> str:
    return f"{status.value} ({status.label_id})"


def render_index(workbook: WorkbookData, stems: List[str]) -> str:
    stats = workbook.stats
    reduction = workbook.risk_reduction

    frontmatter: Dict[str, Any] = {
        "id": workbook.id,
        "name": workbook.name,
        "uploaded_at": workbook.uploaded_at.strftime("%Y-%m-%dT%H:%M:%SZ"),
        "expires_at": workbook.expires_at.strftime("%Y-%m-%dT%H:%M:%SZ"),
        "total_vulnerabilities": stats.total_vulnerabilities,
        "progress_percentage": stats.progress_percentage,
        "average_risk_reduction": stats.average_risk_reduction,
    }

    parts: List[str] = []
    noun = "finding" if stats.total_vulnerabilities == 1 else "findings"
    parts.append(
        f"{stats.total_vulnerabilities} {noun} imported on "
        f"{workbook.uploaded_at.strftime('%Y-%m-%d')}, "
        f"{stats.progress_percentage}% closed."
    )
    parts.append("")

    parts.append("## Risk Distribution")
    parts.append("")
    parts.append(MarkdownFormatter.table(
        ["Level", "Current", "Inherent", "Residual"],
        [
            [
                _level_text(level),
                stats.risk_distribution[level],
                stats.risk_distribution_inherent[level],
                stats.risk_distribution_residual[level],
            ]
            for level in RiskLevel.ordered()
        ],
    ))
    parts.append("")

    parts.append("## Mitigation Status")
    parts.append("")
    parts.append(MarkdownFormatter.table(
        ["Status", "Count"],
        [[_status_text(status), stats.status_distribution[status]]
         for status in MitigationStatus.ordered()],
    ))
    parts.append("")

    parts.append("## Risk Reduction")
    parts.append("")
    if reduction.retested:
        parts.append(f"- **Retested:** {reduction.retested}")
        parts.append(f"- **Reduced:** {reduction.reduced} ({reduction.reduced_percentage}%)")
        parts.append(f"- **Eliminated:** {reduction.eliminated}")
        parts.append(f"- **Unchanged:** {reduction.unchanged}")
        parts.append(f"- **Average reduction:** {stats.average_risk_reduction}%")
    else:
        parts.append("[//]: # (No findings retested yet)")
    parts.append("")

    parts.append("## Findings")
    parts.append("")
    if workbook.vulnerabilities:
        rows = []
        for vuln, stem in zip(workbook.vulnerabilities, stems):
            residual = vuln.retest_risk_level.value if vuln.retest_risk_level else "-"
            rows.append([
                f"[{vuln.id}]({stem}.md)",
                vuln.title,
                vuln.initial_risk_level.value,
                residual,
                effective_status(vuln).value,
            ])
        parts.append(MarkdownFormatter.table(
            ["ID", "Title", "Inherent", "Residual", "Status"], rows,
        ))
    else:
        parts.append("[//]: # (No findings)")

    return MarkdownFormatter.render(
        title=workbook.name,
        body="\n".join(parts),
        frontmatter=frontmatter,
    )


def render_finding(vuln: Vulnerability) -> str:
    frontmatter: Dict[str, Any] = {
        "id": vuln.id,
        "title": vuln.title,
        "classification": vuln.finding_classification,
        "mstg_wstg": vuln.mstg_wstg,
        "affected_object": vuln.affected_object,
        "owner": vuln.owner,
        "due_date": vuln.due_date,
        "status": effective_status(vuln).value,
        "inherent_risk": vuln.initial_risk_level.value,
        "residual_risk": vuln.retest_risk_level.value if vuln.retest_risk_level else None,
        "risk_reduction_percentage": vuln.risk_reduction_percentage,
    }

    parts: List[str] = []
    if vuln.description:
        parts.append(vuln.description)
    else:
        parts.append("[//]: # (No description set)")
    parts.append("")

    parts.append("## Risk Assessment")
    parts.append("")
    parts.append(_build_risk_table(vuln))
    parts.append("")

    parts.append("### OWASP Risk Rating")
    parts.append("")
    parts.append(_build_owasp_section(vuln))
    parts.append("")

    parts.append("## Affected Location")
    parts.append("")
    if vuln.affected_object:
        parts.append(f"- **Object:** {vuln.affected_object}")
    if vuln.affected_path:
        parts.append(f"- **Path:** {vuln.affected_path}")
    if vuln.new_endpoint:
        parts.append(f"- **New endpoint:** {vuln.new_endpoint}")
    if not (vuln.affected_object or vuln.affected_path or vuln.new_endpoint):
        parts.append("[//]: # (No affected location set)")
    parts.append("")

    parts.append("## Recommendation")
    parts.append("")
    if vuln.recommendation:
        parts.append(vuln.recommendation)
    else:
        parts.append("[//]: # (No recommendation set)")
    parts.append("")

    parts.append("## Remediation")
    parts.append("")
    parts.append(f"- **Status:** {_status_text(effective_status(vuln))}")
    if vuln.owner:
        parts.append(f"- **Owner:** {vuln.owner}")
    if vuln.due_date:
        parts.append(f"- **Due:** {vuln.due_date}")
    if vuln.mitigation_status:
        parts.append(f"- **Mitigation:** {vuln.mitigation_status}")
    if vuln.remediation_notes:
        parts.append(_format_note("Notes", vuln.remediation_notes))
    parts.append("")

    parts.append("## Retest")
    parts.append("")
    if vuln.retest_notes or vuln.retest1 or vuln.retest2:
        if vuln.retest1:
            parts.append(f"- **Retest #1:** {vuln.retest1}")
        if vuln.retest2:
            parts.append(f"- **Retest #2:** {vuln.retest2}")
        if vuln.retest_notes:
            parts.append(_format_note("Notes", vuln.retest_notes))
    else:
        parts.append("[//]: # (Not retested yet)")
    parts.append("")

    parts.append("## References")
    parts.append("")
    references = parse_mstg_wstg(vuln.mstg_wstg)
    if references:
        for ref in references:
            parts.append(f"- [{ref.id}]({ref.url})")
    else:
        parts.append("[//]: # (No WSTG references set)")

    return MarkdownFormatter.render(
        title=f"{vuln.id} — {vuln.title}" if vuln.title else vuln.id,
        body="\n".join(parts),
        frontmatter=frontmatter,
    )


def _build_risk_table(vuln: Vulnerability) -> str:
    rows = [[
        "Inherent",
        vuln.ki or "-",
        vuln.di or "-",
        vuln.ri or "-",
        _level_text(vuln.initial_risk_level),
    ]]
    if vuln.retest_risk_level is not None:
        rows.append([
            "Residual",
            vuln.kr,
            vuln.dr,
            vuln.rr,
            _level_text(vuln.retest_risk_level),
        ])
        reduction = f"{vuln.risk_reduction_percentage}%"
    else:
        rows.append(["Residual", "-", "-", "-", "Not retested"])
        reduction = "-"
    table = MarkdownFormatter.table(["", "Likelihood", "Impact", "Risk", "Level"], rows)
    return f"{table}\n\n- **Risk reduction:** {reduction}"


def _build_owasp_section(vuln: Vulnerability) -> str:
    vector = vuln.owasp_vector
    if vector is None:
        if vuln.owasp_risk_rating:
            return f"- **Rating:** `{vuln.owasp_risk_rating}`"
        return "[//]: # (No OWASP risk rating set)"

    values = calculate_owasp_risk_values(vector)
    return "\n".join([
        f"- **Vector:** `{vector.to_vector_string()}`",
        f"- **Likelihood:** {values.likelihood} ({values.likelihood_level.value})",
        f"- **Impact:** {values.impact} ({values.impact_level.value})",
        f"- **Matrix risk:** {_level_text(values.risk_level)}",
        f"- **Factor average risk:** {_level_text(vector_average_level(vector))}",
    ])


def _format_note(label: str, text: str) -> str:
    lines = [line.strip() for line in text.strip().splitlines() if line.strip()]
    if len(lines) == 1:
        return f"- **{label}:** {lines[0]}"
    parts = [f"- **{label}:**"]
    for line in lines:
        parts.append(textwrap.fill(line, width=116, initial_indent="  - ", subsequent_indent="    "))
    return "\n".join(parts)
