from pydantic import BaseModel, Field, model_validator
from typing import List, Literal, Optional

Difficulty = Literal["easy", "medium", "hard"]


class GameProfileOut(BaseModel):
    id: int
    name: str
    slug: str
    front_image_url: str
    profile_image_url: Optional[str] = None
    most_voted_phenotype: Optional[str] = None


class GameRoundOut(BaseModel):
    difficulty: Difficulty
    profiles: List[GameProfileOut] = []


class AnswerIn(BaseModel):
    profile_id: int
    region: str


class AnswerOut(BaseModel):
    correct: bool
    correct_region: Optional[str] = None


class GameResultIn(BaseModel):
    score: int = Field(ge=0)
    total_questions: int = Field(ge=1, le=50)
    difficulty: Difficulty

    @model_validator(mode="after")
    def score_within_total(self):
        if self.score > self.total_questions:
            raise ValueError("score cannot exceed total_questions")
        return self


class GameResultOut(BaseModel):
    id: int
    score: int
    total_questions: int
    difficulty: str

    model_config = {
        "from_attributes": True
    }


class GameStatsOut(BaseModel):
    total_games: int = 0
    total_correct: int = 0
    total_questions: int = 0
    accuracy_percentage: int = 0


class LeaderboardEntryOut(BaseModel):
    user_id: str
    nickname: str
    total_games: int
    total_correct: int
    total_questions: int
    accuracy_percentage: int
