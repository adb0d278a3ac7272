"""
Prompts for reviewing learning/standard registration requests.
"""

from app.models.team import SectionKind


REVIEW_SYSTEM_PREFIX = """
당신은 아래 팀 지식 문서를 관리하는 편집자입니다.
새로 등록하려는 항목을 문서의 기존 학습/기준과 비교해 검토하세요.
검토 결과만 작성하고, 문서 자체를 다시 쓰지 마세요.

--- 팀 지식 문서 ---
"""

STANDARD_STRICT_NOTE = """
- 기준은 모든 결과물에 강제 적용되므로 더욱 엄격하게 검토하세요.
- "이 기준이 다른 업무를 과도하게 제한하지 않는지"도 반드시 검토하세요."""

NO_IMPROVEMENT_TEXT = "개선 제안 없음 - 원본이 충분히 명확합니다."


def create_review_prompt(kind: SectionKind, content: str) -> str:
    """
    Create the user prompt asking for a five-point review of a submission.

    The response format puts any rewrite on a line starting with "개선안:",
    which is what the improvement extractor looks for.
    """
    label = kind.label
    strict_note = STANDARD_STRICT_NOTE if kind is SectionKind.STANDARD else ""

    return f"""다음은 {label} 등록 요청입니다. 아래 5가지 항목을 검토해주세요.{strict_note}

등록 요청 내용: "{content}"

검토 항목:
1. 유효성: 내용이 사실에 부합하는지
2. 구체성: 너무 모호하지 않은지, 실행 가능한 수준인지
3. 충돌 여부: 기존 등록된 학습/기준과 모순되지 않는지
4. 범위: 해당 팀에 맞는 내용인지
5. 개선 가능성: 더 정확하거나 유용하게 다듬을 수 있는지

다음 형식으로 응답해주세요:

📋 [{label}] 등록 검토 결과

✅ 유효성: [판단 결과]
📏 구체성: [판단 결과]
🔄 기존 내용과 충돌: [있음/없음 + 상세]
📂 범위 적합성: [판단 결과]

💡 개선 제안: (있는 경우)
   - 원본: {content}
   - 개선안: [더 나은 버전]
   - 이유: [왜 개선안이 나은지]

개선안이 없으면 "{NO_IMPROVEMENT_TEXT}"라고 작성해주세요."""
