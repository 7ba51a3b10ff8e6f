"""
Shared configuration, constants and value objects.
"""

# Standard Library
import dataclasses


POINTS_PER_INCH = 72.0
MM_PER_INCH = 25.4
POINTS_PER_MM = POINTS_PER_INCH / MM_PER_INCH

# A4 portrait
PAGE_WIDTH_MM = 210.0
PAGE_HEIGHT_MM = 297.0

MIN_LABEL_SIZE_MM = 10.0
MIN_FONT_SIZE = 6.0
MAX_FONT_SIZE = 72.0
MIN_LINE_HEIGHT = 1.0
MAX_LINE_HEIGHT = 3.0
MIN_MARGIN_MM = 2.0

ALIGNMENTS = ("left", "center", "right")

DEFAULT_LABEL_WIDTH = 50.0
DEFAULT_LABEL_HEIGHT = 30.0
DEFAULT_MAX_LINES = 1
DEFAULT_FONT = "Arial"
DEFAULT_FONT_SIZE = 12.0
DEFAULT_LINE_HEIGHT = 1.0
DEFAULT_COUNT = 1
DEFAULT_MARGIN = 10.0
DEFAULT_ALIGNMENT = "left"

OUTLINE_LINE_WIDTH = 0.3
OUTLINE_GRAY = 0.7
PROGRESS_BAR_WIDTH = 20

PREVIEW_PIXELS_PER_MM = 3.0


@dataclasses.dataclass(frozen=True)
class LabelSize:
	width: float
	height: float


@dataclasses.dataclass(frozen=True)
class Margins:
	top: float
	right: float
	bottom: float
	left: float

	@classmethod
	def uniform(cls, value: float) -> "Margins":
		return cls(top=value, right=value, bottom=value, left=value)


@dataclasses.dataclass(frozen=True)
class LabelSpec:
	"""
	User supplied description of one label run.

	Sizes and margins are millimetres, font_size is points and line_height
	is a multiplier of the font size.
	"""
	label_size: LabelSize
	content: str
	max_lines: int = DEFAULT_MAX_LINES
	font: str = DEFAULT_FONT
	font_size: float = DEFAULT_FONT_SIZE
	line_height: float = DEFAULT_LINE_HEIGHT
	count: int = DEFAULT_COUNT
	margin: Margins = dataclasses.field(default_factory=lambda: Margins.uniform(DEFAULT_MARGIN))
	alignment: str = DEFAULT_ALIGNMENT

	def __post_init__(self) -> None:
		if self.count < 1:
			raise ValueError(f"count must be at least 1, got {self.count}")
		if self.alignment not in ALIGNMENTS:
			raise ValueError(f"alignment must be one of {ALIGNMENTS}, got {self.alignment!r}")


@dataclasses.dataclass(frozen=True)
class LayoutDescriptor:
	"""
	Grid packing result for one LabelSpec.

	Holds the label spec it was computed from so renderers can reject a layout
	that no longer matches the label spec they were handed.
	"""
	spec: LabelSpec
	max_cols: int
	max_rows: int
	labels_per_page: int
	total_pages: int
	actual_label_height: float
	content_height: float
	content_lines: tuple[str, ...]
	usable_width: float
	usable_height: float
	page_width: float = PAGE_WIDTH_MM
	page_height: float = PAGE_HEIGHT_MM


@dataclasses.dataclass(frozen=True)
class LabelPlacement:
	index: int
	page: int
	row: int
	col: int
	# millimetres from the top-left page corner
	x: float
	y: float


@dataclasses.dataclass(frozen=True)
class PdfDocument:
	data: bytes
	pages: int
	placements: int


#============================================
def mm_to_points(value: float) -> float:
	"""
	Convert millimetres to points.

	Args:
		value: Millimetre value.

	Returns:
		Points value.
	"""
	return value * POINTS_PER_MM


#============================================
def points_to_mm(value: float) -> float:
	"""
	Convert points to millimetres.

	Args:
		value: Points value.

	Returns:
		Millimetre value.
	"""
	return value / POINTS_PER_MM
