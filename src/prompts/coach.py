"""
Interview Coach Prompt Templates

Contains prompts for:
- Resume analysis and self-introduction drafting
- Question bank generation
- Mock answer evaluation
"""


class CoachPrompts:
    """
    Prompt templates for the re-examination interview coach.

    Key principles:
    - Ground every statement in the candidate's resume
    - Coaching content in Chinese, question text in both languages
    - Feedback is specific and actionable
    """

    def analysis_prompt(self, major: str, university: str) -> str:
        """Prompt for competency evaluation, strengths and self-introductions."""
        return f"""
Role: Expert Postgraduate Entrance Exam (Kaoyan) Coach.
Task: Analyze the provided student resume for a re-examination (interview) at {university} for the {major} major.

1. **Competency Evaluation**:
   - Assess the student's competitiveness relative to peers (Top 10%=A, Top 30%=B, Top 60%=C, Others=D).
   - Determine 'competencyLevel' (A, B, C, or D).
   - Generate 'competencyEvaluation' text in Chinese following this pattern:
     - If A/B: "恭喜你，因为你具备[Strength 1]、[Strength 2]的优势，你在复试中的能力水平定位为[Level]级别，相信通过一定的准备，你一定能够获得较高的复试排名。"
     - If C/D: "很棒！你的[Strength 1]、[Strength 2]经历让你在同辈中处于[Level]级别，只要你用心准备复试，一定能够成功上岸。"

2. **Strengths**: Extract exactly 4 key strengths.
   - For each strength, provide a short 'strength' title.
   - Provide a 'description' that cites specific experiences from the resume.

3. **Self-Introductions**: Generate 3 distinct versions (Chinese & English for each):
   - Version A (Affinity): Focus on personality, communication. (Title: 亲和力与表现力版)
   - Version B (Academic): Focus on research, reading, rigor. (Title: 学术积累与素养版)
   - Version C (Practical): Focus on internships, projects, potential. (Title: 实践经历与潜力版)
"""

    def questions_prompt(self, major: str, university: str) -> str:
        """Prompt for the categorized question bank."""
        return f"""
Role: Strict but helpful Academic Interviewer for {university}, {major} department.
Task: Based on the candidate's resume, generate 8 interview questions categorized exactly as follows:

1. Motivation: Why this school? Why this major? Why research? Focus on deep motivation and resume alignment.
2. Academic: A specific theory relevant to the major, how AI impacts the field, basic concepts or hot topics.
3. Behavioral: Leadership, conflict resolution, teamwork. Answer using the STAR model.
4. Resume: Deep dive into specific resume details (internship, paper, project).
5. Personal: Hobbies, favorite books, family. Show competitive advantage through daily life.

For each question provide:
1. category (one of: Motivation, Academic, Behavioral, Resume, Personal)
2. question: the question in Chinese
3. questionEN: an accurate English translation of the question
4. intent: why the interviewer asks this (in Chinese)
5. structure: recommended answer structure (in Chinese)
6. keyPoints: resume-specific points to mention (in Chinese)
7. recommendedAnswer: a personalized sample answer (in Chinese)
"""

    def evaluation_prompt(
        self,
        question_text: str,
        is_english_round: bool,
        is_audio: bool,
    ) -> str:
        """Prompt for transcribing and giving feedback on one answer."""
        english_note = (
            "NOTE: The student was required to answer in English. "
            "Please evaluate their English proficiency as well."
            if is_english_round else ""
        )
        answer_step = (
            "1. Transcribe the audio recording exactly, word for word."
            if is_audio else
            "1. The student provided a text answer. Return it unchanged as the transcription."
        )
        return f"""
Role: Interview Coach.
Task: The student was asked the following question: "{question_text}".
{english_note}

{answer_step}
2. Provide feedback (in Chinese) on their answer:
   - Did they answer the core question?
   - Did they include personal experiences?
   - Is the structure clear?
   - Is it too long or too short?
   - Suggest one specific improvement.
"""

    def text_answer(self, answer: str) -> str:
        return f'Student Text Answer: "{answer}"'

    def resume_text(self, resume_text: str) -> str:
        return f"\n\nResume Content:\n{resume_text}"

    RESUME_ATTACHED = "\n\n(Resume is attached as a file below)"
