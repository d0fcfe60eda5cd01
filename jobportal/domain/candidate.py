from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any

from ..errors import ValidationError


class SkillLevel(Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


@dataclass
class CandidateSkill:
    name: str
    level: Optional[SkillLevel] = None
    years_of_experience: Optional[float] = None

    def __post_init__(self):
        if not self.name or not isinstance(self.name, str) or not self.name.strip():
            raise ValidationError(errors=[{'field': 'skills.name', 'message': 'is required'}])
        self.name = self.name.strip()
        if self.level is not None and not isinstance(self.level, SkillLevel):
            try:
                self.level = SkillLevel(self.level)
            except ValueError:
                raise ValidationError(errors=[{
                    'field': 'skills.level',
                    'message': f"'{self.level}' is not a valid skill level",
                }])


@dataclass
class TotalExperience:
    """Total professional experience as years plus months."""
    years: int = 0
    months: int = 0

    def __post_init__(self):
        if self.years < 0 or self.months < 0:
            raise ValidationError(errors=[{'field': 'total_experience', 'message': 'must not be negative'}])

    @property
    def in_years(self) -> float:
        """Experience as fractional years."""
        return self.years + self.months / 12


@dataclass
class Education:
    institution: str
    degree: str
    field_of_study: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_current: bool = False


@dataclass
class CandidateProfile:
    """The applicant side of match scoring.

    Attributes:
        name: Display name
        skills: Named skills with proficiency
        total_experience: Professional experience, None when not filled in
        city: Current city
        education: Education records
        email: Contact email
        id: Storage identifier
    """
    name: str
    skills: List[CandidateSkill] = field(default_factory=list)
    total_experience: Optional[TotalExperience] = None
    city: Optional[str] = None
    education: List[Education] = field(default_factory=list)
    email: Optional[str] = None
    id: Optional[int] = None

    def __post_init__(self):
        if not self.name or not isinstance(self.name, str) or not self.name.strip():
            raise ValidationError(errors=[{'field': 'name', 'message': 'is required'}])

    @property
    def skill_names(self) -> List[str]:
        return [skill.name for skill in self.skills]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CandidateProfile':
        """Build a profile from a JSON request body.

        Raises:
            ValidationError: If the body is malformed
        """
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")

        try:
            skills = []
            for item in data.get('skills') or []:
                if isinstance(item, str):
                    skills.append(CandidateSkill(name=item))
                else:
                    skills.append(CandidateSkill(
                        name=item.get('name'),
                        level=item.get('level'),
                        years_of_experience=item.get('years_of_experience'),
                    ))

            total_experience = None
            exp_data = data.get('total_experience')
            if exp_data is not None:
                years = exp_data.get('years') or 0
                months = exp_data.get('months') or 0
                if not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in (years, months)):
                    raise ValidationError(errors=[{'field': 'total_experience', 'message': 'must be numbers'}])
                total_experience = TotalExperience(years=years, months=months)

            education = []
            for item in data.get('education') or []:
                if not item.get('institution') or not item.get('degree'):
                    raise ValidationError(errors=[{
                        'field': 'education',
                        'message': 'institution and degree are required',
                    }])
                education.append(Education(
                    institution=item['institution'],
                    degree=item['degree'],
                    field_of_study=item.get('field_of_study'),
                    is_current=bool(item.get('is_current', False)),
                ))

            return cls(
                name=data.get('name'),
                email=data.get('email'),
                skills=skills,
                total_experience=total_experience,
                city=data.get('city'),
                education=education,
            )
        except (AttributeError, TypeError):
            raise ValidationError("Malformed candidate profile")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'city': self.city,
            'skills': [
                {
                    'name': s.name,
                    'level': s.level.value if s.level else None,
                    'years_of_experience': s.years_of_experience,
                }
                for s in self.skills
            ],
            'total_experience': {
                'years': self.total_experience.years,
                'months': self.total_experience.months,
            } if self.total_experience else None,
            'education': [
                {
                    'institution': e.institution,
                    'degree': e.degree,
                    'field_of_study': e.field_of_study,
                    'is_current': e.is_current,
                }
                for e in self.education
            ],
        }
