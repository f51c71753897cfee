import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

logger = logging.getLogger(__name__)


class DocumentBudget(Enum):
    """Byte ceilings for the AI-context documents."""
    ULTRA_CONDENSED = 3072       # .cursor/rules/design-system.mdc
    BALANCED_MARKDOWN = 3072     # CLAUDE.md
    CONDENSED_TEXT = 2560        # project-knowledge.txt
    EXHAUSTIVE = 102400          # LLMS.txt


class TruncationStyle(Enum):
    """How the truncation notice is written."""
    PLAIN = "plain"         # Plain text reference
    MARKDOWN = "markdown"   # Markdown, MDC and anything with frontmatter


TRUNCATION_MARKERS = {
    TruncationStyle.PLAIN: "\n... [Content truncated for size constraints]\n",
    TruncationStyle.MARKDOWN: "\n*[Content truncated for size constraints]*\n",
}

FENCE_CLOSER = "```\n"
FRONTMATTER_CLOSER = "---\n"


@dataclass
class BudgetResult:
    """Outcome of fitting a document into its byte budget."""
    content: str
    budget: int
    original_size: int
    truncated: bool = False
    warning: bool = False
    message: Optional[str] = None

    @property
    def final_size(self) -> int:
        return len(self.content.encode('utf-8'))

    @property
    def removed_bytes(self) -> int:
        return max(0, self.original_size - self.final_size)


@dataclass
class _LineState:
    end: int                # byte offset just past this line's newline
    in_frontmatter: bool    # frontmatter still open after this line
    in_fence: bool          # fenced code block still open after this line
    table_row: bool         # this line is a markdown table row


def _is_table_row(line: str) -> bool:
    return line.lstrip().startswith('|')


class SizeBudgetEnforcer:
    """
    Trims generated documents to a byte ceiling without breaking structure.

    A cut is only made on a line boundary that is outside YAML frontmatter,
    outside a fenced code block and not between two rows of the same markdown
    table. When the naive cut falls inside such a structure the enforcer backs
    up to the boundary before the structure opened.
    """

    def __init__(self, style: TruncationStyle = TruncationStyle.MARKDOWN):
        self.style = style
        self.marker = TRUNCATION_MARKERS[style]

    def enforce(self, content: str, budget: int, mandatory: str = "") -> BudgetResult:
        """
        Fit ``content`` into ``budget`` bytes.

        Args:
            content: Fully built document.
            budget: Maximum size in UTF-8 bytes.
            mandatory: Leading part of the document that must survive; if the
                cut has to fall inside it the result carries a warning.

        Returns:
            BudgetResult with the (possibly) truncated content.
        """
        encoded = content.encode('utf-8')
        original_size = len(encoded)
        if original_size <= budget:
            return BudgetResult(content, budget, original_size)

        reserve = len(self.marker.encode('utf-8'))
        limit = budget - reserve
        states = self._scan(content)

        cut = self._last_safe_boundary(states, limit)
        warning = False
        closer = ""
        if cut is None:
            warning = True
            cut, closer = self._forced_boundary(states, limit)

        kept = encoded[:cut].decode('utf-8', errors='ignore')
        mandatory_size = len(mandatory.encode('utf-8'))
        if cut < mandatory_size:
            warning = True

        result_content = kept + closer + self.marker
        if len(result_content.encode('utf-8')) > budget:
            result_content = ""
            warning = True

        message = f"Truncated from {original_size} to {len(result_content.encode('utf-8'))} bytes (budget {budget})"
        if warning:
            logger.warning(f"{message}; mandatory content could not be kept intact")
        else:
            logger.info(message)
        return BudgetResult(result_content, budget, original_size, truncated=True,
                            warning=warning, message=message)

    @staticmethod
    def _scan(content: str) -> List[_LineState]:
        states: List[_LineState] = []
        offset = 0
        in_frontmatter = False
        in_fence = False
        lines = content.splitlines(keepends=True)
        for index, line in enumerate(lines):
            offset += len(line.encode('utf-8'))
            stripped = line.strip()
            if index == 0 and stripped == '---':
                in_frontmatter = True
            elif in_frontmatter and stripped == '---':
                in_frontmatter = False
            elif not in_frontmatter and stripped.startswith('```'):
                in_fence = not in_fence
            if line.endswith('\n'):
                states.append(_LineState(offset, in_frontmatter, in_fence,
                                         _is_table_row(line) and not in_fence))
        return states

    @staticmethod
    def _last_safe_boundary(states: List[_LineState], limit: int) -> Optional[int]:
        best = None
        for index, state in enumerate(states):
            if state.end > limit:
                break
            if state.in_frontmatter or state.in_fence:
                continue
            next_state = states[index + 1] if index + 1 < len(states) else None
            if state.table_row and next_state is not None and next_state.table_row:
                continue
            best = state.end
        return best

    @staticmethod
    def _forced_boundary(states: List[_LineState], limit: int):
        """Best effort cut when no structure-safe boundary fits: close what is open."""
        for closer_size in (len(FRONTMATTER_CLOSER), 0):
            best = None
            for state in states:
                if state.end > limit - closer_size:
                    break
                best = state
            if best is None:
                continue
            if best.in_frontmatter:
                return best.end, FRONTMATTER_CLOSER
            if best.in_fence:
                return best.end, FENCE_CLOSER
            return best.end, ""
        return 0, ""


def enforce_budget(content: str, budget: int, style: TruncationStyle = TruncationStyle.MARKDOWN,
                   mandatory: str = "") -> BudgetResult:
    """Shortcut for ``SizeBudgetEnforcer(style).enforce(content, budget, mandatory)``."""
    if isinstance(budget, DocumentBudget):
        budget = budget.value
    return SizeBudgetEnforcer(style).enforce(content, budget, mandatory)
