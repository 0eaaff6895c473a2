"""
Rewrite prompt construction.

The instruction is fixed; only the context label varies. The label names the part
of the résumé being rewritten (e.g., '工作经历-工作描述') so the model can adapt its
register. The user's text is always sent as the separate user message, never
interpolated into the instruction.
"""

from typing import Optional

from vitae.contexts.document.modules import PROFILE_SECTION, FieldRef

DEFAULT_CONTEXT_LABEL = "简历内容"

SYSTEM_PROMPT_TEMPLATE = """你是一位专业的简历优化顾问。请帮用户优化以下简历中「{context}」部分的内容。
要求：
1. 语言精炼、专业，使用简历中常见的正式表述
2. 突出成果和数据（如有相关信息可以量化）
3. 使用动词开头的短句或条目式描述（用 • 列表形式）
4. 保持内容真实，不要捏造不存在的信息，只基于原文进行润色优化
5. 直接输出优化后的内容，不要输出解释或说明"""


def build_system_prompt(context_label: Optional[str]) -> str:
    """Fill the rewrite instruction with a context label (default label if blank)."""
    return SYSTEM_PROMPT_TEMPLATE.format(context=(context_label or "").strip() or DEFAULT_CONTEXT_LABEL)


def context_label_for(target: FieldRef) -> str:
    """
    Context label for a rewrite target.

    Entry fields use '<section title>-<field label>', text modules their section
    title, anything else the default label.

    Examples:
        FieldRef("experience", "desc", 0) -> '工作经历-工作描述'
        FieldRef("summary")               -> '自我评价'
    """
    if target.section == PROFILE_SECTION:
        return DEFAULT_CONTEXT_LABEL

    module = target.module
    if module is None:
        return DEFAULT_CONTEXT_LABEL

    label = module.schema.field_labels.get(target.field) if module.is_repeatable else None
    if label:
        return f"{module.section_title}-{label}"
    return module.section_title
