"""Line-local false-positive suppression.

A finding is dropped when the same line already calls something that
mitigates it. Variables are not tracked across lines, so this both over- and
under-suppresses; results stay a first pass for manual review.
"""

INPUT_RULES = frozenset({
    "unsanitized_get", "unsanitized_post", "unsanitized_request", "unsanitized_cookie",
})

OUTPUT_RULES = frozenset({
    "unescaped_echo", "unescaped_print", "unescaped_short_echo",
})

SANITIZE_TOKENS = (
    "sanitize_", "esc_", "absint", "intval", "floatval", "wp_kses",
    "wp_verify_nonce", "check_ajax_referer", "isset",
)

ESCAPE_TOKENS = (
    "esc_html", "esc_attr", "esc_url", "esc_js", "wp_kses", "wp_json_encode",
)


def is_false_positive(rule_id: str, line: str) -> bool:
    if rule_id in INPUT_RULES:
        return any(token in line for token in SANITIZE_TOKENS)
    if rule_id in OUTPUT_RULES:
        return any(token in line for token in ESCAPE_TOKENS)
    return False
