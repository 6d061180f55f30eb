"""Interview loop and brief generation."""

from brifify.interview.completion import is_complete
from brifify.interview.driver import ConversationDriver, InterviewComplete, QuestionTurn
from brifify.interview.questionnaire import pair_history
from brifify.interview.service import BriefReady, InterviewService
from brifify.interview.synthesizer import BriefSynthesizer
from brifify.interview.workflow import BriefOutcome, BriefWorkflow

__all__ = [
    "BriefOutcome",
    "BriefReady",
    "BriefSynthesizer",
    "BriefWorkflow",
    "ConversationDriver",
    "InterviewComplete",
    "InterviewService",
    "QuestionTurn",
    "is_complete",
    "pair_history",
]
