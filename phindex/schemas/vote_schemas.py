from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from phindex.services.catalog import PHENOTYPE


class VoteShareOut(BaseModel):
    classification: str
    count: int
    percentage: float

    model_config = {
        "from_attributes": True
    }


class TallyOut(BaseModel):
    profile_id: int
    characteristic_type: str
    votes: List[VoteShareOut] = []
    user_vote: Optional[str] = None
    total: int = 0


class VoteIn(BaseModel):
    classification: str = Field(max_length=100)
    characteristic_type: str = PHENOTYPE


class GeographicVotesOut(BaseModel):
    profile_id: int
    geographic_votes: Dict[str, List[VoteShareOut]] = {}
    phenotype_votes: Dict[str, List[VoteShareOut]] = {}


class PhysicalOptionOut(BaseModel):
    option: str
    count: int
    percentage: float


class PhysicalCharacteristicOut(BaseModel):
    name: str
    votes: List[PhysicalOptionOut] = []


class PhysicalVotesOut(BaseModel):
    characteristics: List[PhysicalCharacteristicOut] = []
    user_votes: Dict[str, str] = {}


class VoterCountOut(BaseModel):
    profile_id: int
    unique_voters: int
