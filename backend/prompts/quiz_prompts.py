
ASSESSMENT_GENERATION_TEMPLATE = """
Based on the content below, write {n} multiple-choice questions in {language} that test understanding of the material.
Every question must have exactly 4 answer options.

Return only a JSON object with this shape:
{{"questions": [{{"id": "q1", "questionText": "...", "options": [{{"id": "opt1", "text": "..."}}, {{"id": "opt2", "text": "..."}}, {{"id": "opt3", "text": "..."}}, {{"id": "opt4", "text": "..."}}], "correctOptionId": "opt2", "explanation": "..."}}]}}
Question ids are 'q1', 'q2', ...; option ids are 'opt1' to 'opt4' within each question; correctOptionId must be one of that question's option ids.

Rules for the explanation:
- Start directly with the concept, without judging openers such as "Exactly right!" or "Not quite.".
- Explain why the correct answer is correct and why the other options are wrong, referring to the core concept of the material.
- Keep it short (at most 3 sentences).
- After the main explanation, add "Hint:" followed by one sentence recommending the specific topic to study again for this question.
- Write in a casual but professional tone.

Content:
---
{content}
---
"""
