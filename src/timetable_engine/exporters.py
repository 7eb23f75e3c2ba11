"""Export functionality for generated timetables."""

import json
from abc import ABC, abstractmethod
from pathlib import Path

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, Side

from .allocation.orchestrator import GenerationResult
from .exceptions import InvalidTimeRangeError, ScheduleFileError
from .models import Course, Faculty, Room, ScheduledSlot
from .utils import day_index

# Fonts
FONT_TITLE = Font(name="Times New Roman", size=16, bold=True)
FONT_HEADER = Font(name="Times New Roman", size=12, bold=True)
FONT_TIME = Font(name="Times New Roman", size=10, bold=False)
FONT_CELL = Font(name="Times New Roman", size=11, bold=False)

# Alignments
ALIGN_CENTER = Alignment(horizontal="center", vertical="center", wrap_text=True)
ALIGN_LEFT = Alignment(horizontal="left", vertical="center", wrap_text=False)

# Borders
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

TIME_COLUMN_WIDTH = 14.0
DAY_COLUMN_WIDTH = 28.0
GRID_ROW_HEIGHT = 60.0
HEADER_ROW = 3
SUMMARY_SHEET = "Summary"

ALLOCATION_COLUMNS = [
    "course_id",
    "room_id",
    "faculty_id",
    "day",
    "start_time",
    "session_type",
    "confidence",
    "conflicts",
    "reasoning",
]
SLOT_COLUMNS = ["course_id", "room_id", "faculty_id", "day", "start_time", "end_time", "session_type"]


class BaseExporter(ABC):
    """Base class for exporters."""

    @abstractmethod
    def export(self, result: GenerationResult, output_path: str | Path) -> None:
        """Export generation result to file.

        Args:
            result: GenerationResult to export
            output_path: Path to output file or directory
        """
        pass


class JSONExporter(BaseExporter):
    """Export to JSON format."""

    def __init__(self, indent: int = 2, ensure_ascii: bool = False):
        """Initialize exporter.

        Args:
            indent: JSON indentation level
            ensure_ascii: If False, allows non-ASCII characters
        """
        self.indent = indent
        self.ensure_ascii = ensure_ascii

    def export(self, result: GenerationResult, output_path: str | Path) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(
                result.to_dict(),
                f,
                indent=self.indent,
                ensure_ascii=self.ensure_ascii,
            )


class CSVExporter(BaseExporter):
    """Export to CSV format (multiple files)."""

    def export(self, result: GenerationResult, output_path: str | Path) -> None:
        """Export generation result to CSV files.

        Creates three files:
        - slots.csv: Scheduled slots
        - allocations.csv: Allocation results with confidence and conflicts
        - summary.csv: Overall metrics

        Args:
            result: GenerationResult to export
            output_path: Path to output directory
        """
        output_dir = Path(output_path)
        output_dir.mkdir(parents=True, exist_ok=True)

        export_slots_csv(result.slots, output_dir / "slots.csv")
        self._export_allocations(result, output_dir / "allocations.csv")
        self._export_summary(result, output_dir / "summary.csv")

    def _export_allocations(self, result: GenerationResult, output_path: Path) -> None:
        rows = []
        for allocation in result.results:
            rows.append(
                {
                    "course_id": allocation.course_id,
                    "room_id": allocation.selected_room.id if allocation.selected_room else "",
                    "faculty_id": allocation.faculty_id or "",
                    "day": allocation.time_slot.day.value if allocation.time_slot else "",
                    "start_time": allocation.time_slot.start_time if allocation.time_slot else "",
                    "session_type": allocation.session_type.value if allocation.session_type else "",
                    "confidence": round(allocation.confidence, 2),
                    "conflicts": "; ".join(c.type.value for c in allocation.conflicts),
                    "reasoning": allocation.reasoning,
                }
            )
        pd.DataFrame(rows, columns=ALLOCATION_COLUMNS).to_csv(output_path, index=False)

    def _export_summary(self, result: GenerationResult, output_path: Path) -> None:
        pd.DataFrame(summary_rows(result)).to_csv(output_path, index=False)


def summary_rows(result: GenerationResult) -> list[dict]:
    """Metric/value rows describing a generation run."""
    rows = [
        {"metric": "method", "value": result.method.value},
        {"metric": "total_scheduled", "value": result.total_scheduled},
        {"metric": "warnings", "value": len(result.warnings)},
    ]
    if result.metrics is not None:
        metrics = result.metrics.to_dict()
        for key in (
            "total_allocations",
            "successful_allocations",
            "success_rate",
            "type_match_accuracy",
            "facility_match_rate",
            "conflict_rate",
            "balance_score",
        ):
            rows.append({"metric": key, "value": metrics[key]})
    if result.validation is not None:
        rows.append({"metric": "is_valid", "value": result.validation.is_valid})
        rows.append({"metric": "validation_errors", "value": len(result.validation.errors)})
    return rows


class TimetableExcelExporter(BaseExporter):
    """Export to an Excel workbook: one day x time grid per room plus a summary.

    Catalogs are optional and only used for display names; without them
    cells show ids.
    """

    def __init__(
        self,
        rooms: list[Room] | None = None,
        courses: list[Course] | None = None,
        faculty: list[Faculty] | None = None,
    ):
        self.rooms = list(rooms or [])
        self.course_by_id = {c.id: c for c in courses or []}
        self.faculty_by_id = {f.id: f for f in faculty or []}

    def export(self, result: GenerationResult, output_path: str | Path) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.create_workbook(result).save(output_path)

    def create_workbook(self, result: GenerationResult) -> Workbook:
        """Create workbook with one sheet per used room and a summary sheet."""
        wb = Workbook()
        wb.remove(wb.active)

        by_room: dict[str, list[ScheduledSlot]] = {}
        for slot in result.slots:
            by_room.setdefault(slot.room_id, []).append(slot)

        used_names: set[str] = {SUMMARY_SHEET}
        for room_id in self.room_order(by_room):
            title = self.unique_sheet_name(self.room_label(room_id), used_names)
            ws = wb.create_sheet(title=title)
            self.fill_room_sheet(ws, room_id, by_room[room_id])

        summary = wb.create_sheet(title=SUMMARY_SHEET)
        self.fill_summary_sheet(summary, result)
        return wb

    def room_order(self, by_room: dict[str, list[ScheduledSlot]]) -> list[str]:
        """Inventory order first, then any other rooms by id."""
        known = [r.id for r in self.rooms if r.id in by_room]
        extra = sorted(room_id for room_id in by_room if room_id not in known)
        return known + extra

    def room_label(self, room_id: str) -> str:
        room = next((r for r in self.rooms if r.id == room_id), None)
        return room.name or room.id if room else room_id

    @staticmethod
    def sanitize_sheet_name(name: str) -> str:
        """Remove characters Excel rejects and cut to 31 characters."""
        invalid_chars = r"/\*?:[]"
        for char in invalid_chars:
            name = name.replace(char, "")
        return name[:31] or "Room"

    def unique_sheet_name(self, name: str, used: set[str]) -> str:
        base = self.sanitize_sheet_name(name)
        candidate = base
        counter = 2
        while candidate in used:
            suffix = f" ({counter})"
            candidate = base[: 31 - len(suffix)] + suffix
            counter += 1
        used.add(candidate)
        return candidate

    def format_cell_content(self, slot: ScheduledSlot) -> str:
        """Course, session type and faculty, one per line."""
        course = self.course_by_id.get(slot.course_id)
        title = f"{course.code} {course.name}".strip() if course else slot.course_id
        lines = [title, slot.session_type.value]
        if slot.faculty_id:
            member = self.faculty_by_id.get(slot.faculty_id)
            lines.append(member.name if member else slot.faculty_id)
        return "\n".join(lines)

    def fill_room_sheet(self, ws, room_id: str, slots: list[ScheduledSlot]) -> None:
        days = sorted({s.day.value for s in slots}, key=day_index)
        times = sorted({(s.time_slot.start_time, s.time_slot.end_time) for s in slots})

        ws["A1"] = self.room_label(room_id)
        ws["A1"].font = FONT_TITLE
        ws["A1"].alignment = ALIGN_LEFT

        ws.column_dimensions["A"].width = TIME_COLUMN_WIDTH
        header = ws.cell(row=HEADER_ROW, column=1, value="Time")
        header.font = FONT_HEADER
        header.alignment = ALIGN_CENTER
        header.border = THIN_BORDER

        day_column = {}
        for i, day in enumerate(days):
            column = i + 2
            day_column[day] = column
            cell = ws.cell(row=HEADER_ROW, column=column, value=day)
            cell.font = FONT_HEADER
            cell.alignment = ALIGN_CENTER
            cell.border = THIN_BORDER
            ws.column_dimensions[cell.column_letter].width = DAY_COLUMN_WIDTH

        time_row = {}
        for i, (start, end) in enumerate(times):
            row = HEADER_ROW + 1 + i
            time_row[start] = row
            ws.row_dimensions[row].height = GRID_ROW_HEIGHT
            cell = ws.cell(row=row, column=1, value=f"{start}-{end}")
            cell.font = FONT_TIME
            cell.alignment = ALIGN_CENTER
            cell.border = THIN_BORDER
            for column in day_column.values():
                empty = ws.cell(row=row, column=column)
                empty.border = THIN_BORDER
                empty.alignment = ALIGN_CENTER
                empty.font = FONT_CELL

        for slot in slots:
            cell = ws.cell(
                row=time_row[slot.time_slot.start_time],
                column=day_column[slot.day.value],
            )
            cell.value = self.format_cell_content(slot)

    @staticmethod
    def fill_summary_sheet(ws, result: GenerationResult) -> None:
        ws.column_dimensions["A"].width = 28.0
        ws.column_dimensions["B"].width = 20.0
        for column, title in enumerate(("Metric", "Value"), start=1):
            cell = ws.cell(row=1, column=column, value=title)
            cell.font = FONT_HEADER
            cell.border = THIN_BORDER

        row = 2
        for item in summary_rows(result):
            ws.cell(row=row, column=1, value=item["metric"]).border = THIN_BORDER
            ws.cell(row=row, column=2, value=item["value"]).border = THIN_BORDER
            row += 1

        for warning in result.warnings:
            ws.cell(row=row, column=1, value="warning")
            ws.cell(row=row, column=2, value=warning)
            row += 1


def get_exporter(format_type: str) -> BaseExporter:
    """Get appropriate exporter for format type.

    Args:
        format_type: Export format ('json', 'csv', 'excel')

    Returns:
        Exporter instance

    Raises:
        ValueError: If format type is not supported
    """
    exporters = {
        "json": JSONExporter,
        "csv": CSVExporter,
        "excel": TimetableExcelExporter,
    }

    if format_type not in exporters:
        raise ValueError(
            f"Unsupported format: {format_type}. Supported: {', '.join(exporters.keys())}"
        )

    return exporters[format_type]()


def export_generation_json(result: GenerationResult, output_path: Path | str) -> None:
    """Export generation result to JSON file.

    Args:
        result: GenerationResult to export
        output_path: Path to output JSON file
    """
    JSONExporter().export(result, output_path)


def export_slots_csv(slots: list[ScheduledSlot], output_path: Path | str) -> None:
    """Export scheduled slots to a CSV file, one row per teaching hour."""
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame([s.to_dict() for s in slots], columns=SLOT_COLUMNS)
    df.to_csv(output, index=False)


def load_schedule_json(input_path: Path | str) -> list[ScheduledSlot]:
    """Load scheduled slots from a JSON file.

    Accepts either a generation export (object with a "slots" list) or a
    bare list of slot objects.

    Raises:
        ScheduleFileError: If the file cannot be parsed.
    """
    try:
        with open(input_path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ScheduleFileError(input_path, "file not found") from e
    except json.JSONDecodeError as e:
        raise ScheduleFileError(input_path, f"invalid JSON: {e}") from e

    if isinstance(data, dict):
        data = data.get("slots")
    if not isinstance(data, list):
        raise ScheduleFileError(input_path, "expected a list of slots")

    try:
        return [ScheduledSlot.from_dict(item) for item in data]
    except (KeyError, TypeError, ValueError, InvalidTimeRangeError) as e:
        raise ScheduleFileError(input_path, f"invalid slot: {e}") from e
