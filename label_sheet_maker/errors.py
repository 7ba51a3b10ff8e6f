"""
Failure types raised by layout and rendering.
"""

# Standard Library
import dataclasses


@dataclasses.dataclass(frozen=True)
class Violation:
	rule: str
	message: str
	values: dict = dataclasses.field(default_factory=dict, compare=False)


class LabelSheetError(Exception):
	"""
	Base class for label sheet failures.
	"""


class ValidationFailure(LabelSheetError):
	"""
	One or more layout rules were violated.

	Carries every violated rule in evaluation order so a caller can show the
	complete list at once.
	"""

	def __init__(self, violations: list[Violation]) -> None:
		self.violations = tuple(violations)
		super().__init__(self.format_message())

	@property
	def messages(self) -> list[str]:
		return [violation.message for violation in self.violations]

	@property
	def rules(self) -> list[str]:
		return [violation.rule for violation in self.violations]

	def format_message(self) -> str:
		return "Layout is not feasible:\n" + "\n".join(self.messages)


class PreconditionFailure(LabelSheetError):
	"""
	A renderer was called without a current layout.
	"""


class RenderingFailure(LabelSheetError):
	"""
	Text measurement or document packaging failed.
	"""
