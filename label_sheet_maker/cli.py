"""
CLI entry points for label sheet layout and export.
"""

# Standard Library
import argparse
import json
import pathlib
import time

# local repo modules
import label_sheet_maker as lsm
import label_sheet_maker.config
import label_sheet_maker.errors
import label_sheet_maker.layout
import label_sheet_maker.pdf_render
import label_sheet_maker.preview
import label_sheet_maker.word_render


LabelSpec = lsm.config.LabelSpec
LabelSize = lsm.config.LabelSize
Margins = lsm.config.Margins
ValidationFailure = lsm.errors.ValidationFailure
RenderingFailure = lsm.errors.RenderingFailure

FORMATS = ("pdf", "docx")


#============================================
def read_content(args: argparse.Namespace) -> str:
	"""
	Read label content from the CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		Content text with literal "\\n" sequences turned into newlines.
	"""
	if args.content_file is not None:
		text = pathlib.Path(args.content_file).read_text(encoding="utf-8")
		return text.rstrip("\n")
	return args.content.replace("\\n", "\n")


#============================================
def build_spec(args: argparse.Namespace) -> LabelSpec:
	"""
	Build a label spec from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		LabelSpec.
	"""
	def side(value: float | None) -> float:
		if value is None:
			return args.margin
		return value

	margin = Margins(
		top=side(args.margin_top),
		right=side(args.margin_right),
		bottom=side(args.margin_bottom),
		left=side(args.margin_left),
	)
	spec = LabelSpec(
		label_size=LabelSize(width=args.width, height=args.height),
		content=read_content(args),
		max_lines=args.max_lines,
		font=args.font,
		font_size=args.font_size,
		line_height=args.line_height,
		count=args.count,
		margin=margin,
		alignment=args.align,
	)
	return spec


#============================================
def resolve_format(args: argparse.Namespace) -> str | None:
	"""
	Pick the export format from --format or the output suffix.

	Args:
		args: Parsed argparse namespace.

	Returns:
		"pdf", "docx" or None when nothing is exported.
	"""
	if args.output_path is None:
		return None
	if args.format is not None:
		return args.format
	suffix = pathlib.Path(args.output_path).suffix.lower().lstrip(".")
	if suffix in FORMATS:
		return suffix
	raise SystemExit(f"Cannot infer output format from {args.output_path!r}, use --format.")


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Optional argument list, defaults to sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Lay out repeated labels on A4 sheets and export PDF or Word.")

	label_group = parser.add_argument_group("Label")
	label_group.add_argument("-W", "--width", dest="width", type=float, help="Label width in mm.")
	label_group.add_argument("-H", "--height", dest="height", type=float, help="Label height in mm.")
	content_source = label_group.add_mutually_exclusive_group()
	content_source.add_argument("-t", "--content", dest="content", help="Label text, use \\n for new lines.")
	content_source.add_argument("-T", "--content-file", dest="content_file", default=None, help="Read label text from a file.")
	label_group.add_argument("-L", "--max-lines", dest="max_lines", type=int, help="Maximum lines per label.")
	label_group.add_argument("-f", "--font", dest="font", help="Font name.")
	label_group.add_argument("-s", "--font-size", dest="font_size", type=float, help="Font size in points.")
	label_group.add_argument("-l", "--line-height", dest="line_height", type=float, help="Line height multiplier.")
	label_group.add_argument("-n", "--count", dest="count", type=int, help="Number of labels.")
	label_group.add_argument("-a", "--align", dest="align", choices=lsm.config.ALIGNMENTS, help="Text alignment.")

	margin_group = parser.add_argument_group("Margins")
	margin_group.add_argument("--margin", dest="margin", type=float, help="All page margins in mm.")
	margin_group.add_argument("--margin-top", dest="margin_top", type=float, default=None, help="Top margin in mm.")
	margin_group.add_argument("--margin-right", dest="margin_right", type=float, default=None, help="Right margin in mm.")
	margin_group.add_argument("--margin-bottom", dest="margin_bottom", type=float, default=None, help="Bottom margin in mm.")
	margin_group.add_argument("--margin-left", dest="margin_left", type=float, default=None, help="Left margin in mm.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", default=None, help="Output .pdf or .docx path.")
	output_group.add_argument("-F", "--format", dest="format", choices=FORMATS, default=None, help="Output format.")
	output_group.add_argument("-m", "--manifest", dest="manifest_path", default=None, help="Output layout JSON path.")
	output_group.add_argument("-p", "--preview", dest="preview_path", default=None, help="Output preview PNG path.")

	behavior_group = parser.add_argument_group("Behavior")
	behavior_group.add_argument("-d", "--draw-outlines", dest="draw_outlines", action="store_true", help="Draw label outlines in the PDF.")
	behavior_group.add_argument("-D", "--no-draw-outlines", dest="draw_outlines", action="store_false", help="Disable label outlines.")
	behavior_group.add_argument(
		"--stop-before-rendering",
		dest="stop_before_rendering",
		action="store_true",
		help="Stop after computing the layout (skip export).",
	)

	parser.set_defaults(
		width=lsm.config.DEFAULT_LABEL_WIDTH,
		height=lsm.config.DEFAULT_LABEL_HEIGHT,
		content="",
		max_lines=lsm.config.DEFAULT_MAX_LINES,
		font=lsm.config.DEFAULT_FONT,
		font_size=lsm.config.DEFAULT_FONT_SIZE,
		line_height=lsm.config.DEFAULT_LINE_HEIGHT,
		count=lsm.config.DEFAULT_COUNT,
		align=lsm.config.DEFAULT_ALIGNMENT,
		margin=lsm.config.DEFAULT_MARGIN,
		draw_outlines=False,
		stop_before_rendering=False,
	)

	args = parser.parse_args(argv)
	return args


#============================================
def print_layout(summary: dict) -> None:
	"""
	Print the layout numbers a user needs before exporting.

	Args:
		summary: Layout summary dictionary.
	"""
	page = summary["page"]
	print(f"Usable area: {page['usable_width']:g} x {page['usable_height']:g} mm")
	print(f"Label height used: {summary['actual_label_height']:g} mm")
	print(f"Labels per row: {summary['columns']}")
	print(f"Labels per column: {summary['rows']}")
	print(f"Labels per page: {summary['labels_per_page']}")
	print(f"Total pages: {summary['total_pages']}")
	print(f"Labels on last page: {summary['last_page_labels']}")


#============================================
def run_pipeline(args: argparse.Namespace) -> int:
	"""
	Compute the layout and export the requested outputs.

	Args:
		args: Parsed argparse namespace.

	Returns:
		Process exit status.
	"""
	output_format = resolve_format(args)
	try:
		spec = build_spec(args)
	except ValueError as error:
		raise SystemExit(f"Invalid label options: {error}") from error
	print("Label sheet layout")
	print(f"Label: {spec.label_size.width:g} x {spec.label_size.height:g} mm, count {spec.count}")
	print(f"Font: {spec.font} {spec.font_size:g}pt, line height {spec.line_height:g}, align {spec.alignment}")

	start_time = time.perf_counter()
	try:
		layout = lsm.layout.compute_layout(spec)
	except ValidationFailure as failure:
		print("Layout is not feasible:")
		for message in failure.messages:
			print(f"  - {message}")
		return 1
	except RenderingFailure as failure:
		print(f"Cannot measure label text: {failure}")
		return 1
	layout_end = time.perf_counter()

	summary = lsm.layout.layout_summary(spec, layout)
	print_layout(summary)

	if args.manifest_path:
		manifest_path = pathlib.Path(args.manifest_path)
		with manifest_path.open("w", encoding="utf-8") as handle:
			json.dump(summary, handle, indent=2, sort_keys=True)
		print(f"Manifest written: {manifest_path}")

	if args.preview_path:
		preview_path = pathlib.Path(args.preview_path)
		lsm.preview.write_preview(spec, layout, preview_path)
		print(f"Preview written: {preview_path}")

	if args.stop_before_rendering or output_format is None:
		print("Stopping before rendering.")
		return 0

	output_path = pathlib.Path(args.output_path)
	render_start = time.perf_counter()
	try:
		if output_format == "pdf":
			document = lsm.pdf_render.write_pdf(
				spec,
				layout,
				output_path,
				draw_outlines=args.draw_outlines,
				verbose=True,
			)
			print(f"Pages written: {document.pages}")
			print(f"Labels placed: {document.placements}")
		else:
			size = lsm.word_render.write_word(spec, layout, output_path)
			print(f"Sections written: {layout.total_pages}")
			print(f"Bytes written: {size}")
	except lsm.errors.LabelSheetError as failure:
		print(f"Export failed: {failure}")
		return 1
	render_end = time.perf_counter()

	print(
		"Timing: layout={:.2f}s render={:.2f}s".format(
			layout_end - start_time,
			render_end - render_start,
		)
	)
	print(f"Output written: {output_path}")
	return 0


#============================================
def main(argv: list[str] | None = None) -> None:
	"""
	Main entry point.
	"""
	args = parse_args(argv)
	status = run_pipeline(args)
	if status != 0:
		raise SystemExit(status)
