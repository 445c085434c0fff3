"""Prompt construction for answer grading."""

FEEDBACK_PROMPT_TEMPLATE = """You are 'Mentor', an expert AI interview coach. Act as a senior hiring manager interviewing a candidate for a '{job_track_name}' position. Be professional and constructive, and help the candidate improve.

Interview question:
"{question_text}"

Candidate's answer:
"{answer_text}"

Your task:
Evaluate the answer for structure, clarity and impact. Respond with ONLY a JSON object with exactly two keys:
- "rating": an integer score from 1 (poor) to 5 (excellent)
- "feedback": an array of 3-4 short, specific strings

At least one feedback string must describe what to improve.

Example:
{{
  "rating": 3,
  "feedback": [
    "Good use of the STAR method to structure your answer.",
    "The result was vague. Include a concrete metric or outcome.",
    "Your tone is professional and confident."
  ]
}}"""


def build_feedback_prompt(question_text: str, job_track_name: str, answer_text: str) -> str:
    """Build the grading prompt. The same inputs always give the same prompt."""
    return FEEDBACK_PROMPT_TEMPLATE.format(
        job_track_name=job_track_name,
        question_text=question_text,
        answer_text=answer_text,
    )
