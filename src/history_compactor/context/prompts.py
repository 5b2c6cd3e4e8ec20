"""Prompts for the history summarizer."""

# Formatted with the five rendered history sections.
SUMMARY_SYSTEM_PROMPT = """You compress long agent conversations so the agent can keep working within its context window.

<system_prompt>
{system_prompt}
</system_prompt>

<user_messages>
{user_messages}
</user_messages>

<previous_summary>
{previous_summary}
</previous_summary>

<older_messages>
{older_messages}
</older_messages>

<recent_messages>
{recent_messages}
</recent_messages>

Write a summary that replaces <previous_summary> and <older_messages>:
1. Keep every decision, result and open task from the older messages
2. Fold in the previous summary rather than repeating it
3. Record tool calls that produced facts the agent still needs
4. Skip anything already visible in <recent_messages>; those stay verbatim

Respond with the summary text only."""

SUMMARY_REQUEST = "summarize 'older_messages': "
