"""Decision report generation and loading.

Persists the auto mode audit trail next to the album folder so a later
interactive session (or a human) can see why an album was saved or deferred.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

from tagmatch.models.decision import AutoModeOutcome
from tagmatch.utils.constants import DEFAULT_REPORT_BASENAME, REPORT_TITLE
from tagmatch.utils.logger import get_logger

logger = get_logger("core.report_writer")


class ReportWriter:
    """Generates and loads JSON/TXT reports for one auto mode outcome."""

    @staticmethod
    def build_report_data(outcome: AutoModeOutcome, folder: Path | None = None) -> dict:
        """Build the machine-readable report dict.

        Args:
            outcome: Completed auto mode outcome.
            folder: Album folder the outcome belongs to.

        Returns:
            JSON-serializable dict.
        """
        selection = outcome.selection
        plan = outcome.tagging_plan
        review = outcome.review_request
        strategy_results = review.strategy_results if review else []

        return {
            "generated_at": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            "folder": str(folder) if folder else None,
            "decision": outcome.decision.value,
            "rationale": outcome.rationale,
            "cancelled": bool(selection and selection.cancelled),
            "catalogs_tried": list(selection.catalogs_tried) if selection else [],
            "chosen": selection.chosen.as_dict() if selection and selection.chosen else None,
            "candidates": [c.as_dict() for c in selection.candidates] if selection else [],
            "winner": outcome.winner.as_dict() if outcome.winner else None,
            "strategy_results": [r.as_dict() for r in strategy_results],
            "tagging_plan": {
                "album_id": plan.album.id,
                "catalog": plan.album.catalog,
                "strategy": plan.strategy,
                "genres": list(plan.genres),
                "save_cover": plan.save_cover,
                "cover_url": plan.album.cover_url,
            } if plan else None,
            "transitions": [t.as_dict() for t in outcome.transitions],
        }

    @staticmethod
    def write_decision_report(
        folder: Path,
        outcome: AutoModeOutcome,
        basename: str = DEFAULT_REPORT_BASENAME,
    ) -> tuple[Path | None, Path | None]:
        """Write the decision report for one album folder.

        Generates two files in the folder:
        - <basename>.json  -- machine-readable, used by the review UI
        - <basename>.txt   -- human-readable summary

        Args:
            folder: Album folder the outcome belongs to.
            outcome: Completed auto mode outcome.
            basename: File name without extension.

        Returns:
            (json_path, txt_path); an entry is None if that file failed.
        """
        folder = Path(folder)
        folder.mkdir(parents=True, exist_ok=True)
        report_data = ReportWriter.build_report_data(outcome, folder)

        json_path: Path | None = folder / f"{basename}.json"
        try:
            json_path.write_text(
                json.dumps(report_data, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
            logger.info("Decision report (JSON) written to: %s", json_path)
        except OSError as e:
            logger.error("Failed to write JSON report: %s", e)
            json_path = None

        txt_path: Path | None = folder / f"{basename}.txt"
        try:
            txt_path.write_text(ReportWriter.format_text(report_data), encoding="utf-8")
            logger.info("Decision report (TXT) written to: %s", txt_path)
        except OSError as e:
            logger.error("Failed to write TXT report: %s", e)
            txt_path = None

        return json_path, txt_path

    @staticmethod
    def format_text(report_data: dict) -> str:
        """Render the human-readable report from the JSON report dict."""
        lines = [
            REPORT_TITLE,
            f"Generated: {report_data['generated_at']}",
            f"Folder: {report_data.get('folder') or '?'}",
            "",
            "=== Decision ===",
            f"  {report_data['decision']}",
            f"  {report_data['rationale']}",
            "",
        ]
        if report_data.get("cancelled"):
            lines.extend(["  Cancelled before the fallback chain finished.", ""])

        candidates = report_data.get("candidates", [])
        lines.append(f"=== Album Candidates ({len(candidates)}) ===")
        lines.append(f"  Catalogs tried: {', '.join(report_data.get('catalogs_tried', [])) or 'none'}")
        lines.append("")
        for c in candidates:
            lines.append(f"  [{c['catalog']}] {c['artist']} - {c['album']} ({c['track_count']} tracks)")
            lines.append(
                f"    Score: {c['score']:.3f} (artist {c['artist_similarity']:.2f}, "
                f"album {c['album_similarity']:.2f}, track count {c['track_count_score']:.2f})"
            )
        if candidates:
            lines.append("")

        results = report_data.get("strategy_results") or []
        if not results and report_data.get("winner"):
            results = [report_data["winner"]]
        if results:
            lines.append(f"=== Sort Strategies ({len(results)}) ===")
            lines.append("")
            for r in results:
                lines.append(
                    f"  {r['strategy']}: {r['high_count']} HIGH, "
                    f"aggregate {r['aggregate_percentage']:.1f}%"
                )
            lines.append("")

        winner = report_data.get("winner")
        if winner:
            lines.append(f"=== Track Pairs ({winner['strategy']}) ===")
            lines.append("")
            for p in winner["pairs"]:
                local = p["local_title"] or "(no local file)"
                provider = p["provider_title"] or "(no catalog track)"
                lines.append(f"  {local} -> {provider}  [{p['level']} {p['score']:.2f} {p['basis']}]")
            lines.append("")

        lines.append("=== Transitions ===")
        lines.append("")
        for t in report_data.get("transitions", []):
            lines.append(f"  {t['from']} -> {t['to']}: {t['rationale']}")

        return "\n".join(lines) + "\n"

    @staticmethod
    def load_decision_report(folder: Path, basename: str = DEFAULT_REPORT_BASENAME) -> dict | None:
        """Load a previous decision report.

        Args:
            folder: Album folder.
            basename: File name without extension.

        Returns:
            Parsed report data dict, or None if no readable report exists.
        """
        json_path = Path(folder) / f"{basename}.json"
        if not json_path.exists():
            logger.debug("No decision report found at %s", json_path)
            return None

        try:
            data = json.loads(json_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("Failed to load decision report: %s", e)
            return None
        logger.info(
            "Loaded decision report: %s with %d candidate(s) (from %s)",
            data.get("decision", "?"),
            len(data.get("candidates", [])),
            data.get("generated_at", "?"),
        )
        return data
