"""Prompt construction for execution summaries."""

import json
import logging
from typing import Any, Callable, Dict, List, Optional

from execution.models import ExecutionReport, Statistics
from llm.providers.base import LLMMessage

logger = logging.getLogger(__name__)


class SummaryPrompts:
    """
    Prompt templates for summarizing executed action plans.
    """

    SYSTEM = """You are a helpful assistant that summarizes code changes.
Generate a concise, well-formatted markdown summary of the instruction execution results.
Focus on what files were changed, what the changes accomplished, and any errors encountered.

Your summary should include:
1. An overview section with success rate and types of changes
2. Sections for created, modified, and deleted files with brief descriptions
3. A summary of commands executed
4. Any errors or warnings that occurred
5. Use appropriate markdown formatting with headers, lists, and emojis where appropriate

Be concise but informative, focusing on helping the user understand what happened."""

    @staticmethod
    def format_results(
        report: ExecutionReport,
        statistics: Statistics,
        include_success_messages: bool = True,
    ) -> Dict[str, Any]:
        """Results as the model sees them; file contents are never included."""
        actions = []
        for result in report.actions:
            message = result.message
            if result.success and not include_success_messages:
                message = None
            actions.append({
                "type": result.type.value,
                "target": result.target,
                "command": result.command,
                "status": result.status.value,
                "message": message,
                "error": result.error,
            })

        return {
            "success": report.success,
            "projectRoot": report.project_root,
            "actions": actions,
            "statistics": statistics.model_dump(by_alias=True),
        }

    @classmethod
    def build_messages(
        cls,
        report: ExecutionReport,
        statistics: Statistics,
        count_tokens: Optional[Callable[[str], int]] = None,
        max_prompt_tokens: Optional[int] = None,
    ) -> List[LLMMessage]:
        """
        Build the summary conversation

        Args:
            report: Report to summarize
            statistics: Counts computed from the report
            count_tokens: Tokenizer used to enforce the budget
            max_prompt_tokens: Prompt budget; unlimited when None

        Returns:
            System and user messages
        """
        payload = json.dumps(cls.format_results(report, statistics))

        if count_tokens and max_prompt_tokens:
            used = count_tokens(cls.SYSTEM) + count_tokens(payload)
            if used > max_prompt_tokens:
                logger.info(
                    f"Summary prompt uses {used} tokens (budget {max_prompt_tokens}), "
                    f"dropping messages of successful actions"
                )
                payload = json.dumps(
                    cls.format_results(report, statistics, include_success_messages=False)
                )

        return [
            LLMMessage(role="system", content=cls.SYSTEM),
            LLMMessage(role="user", content=payload),
        ]
