from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from jobboard.db.base import Base

# Free-text profile fields, in the order clients send them.
CV_FIELDS = (
    "nom",
    "prenom",
    "localisation",
    "work_experience",
    "work_experience_duree",
    "education",
    "education_duree",
    "skills",
    "languages",
    "certifications_and_licenses",
    "links",
    "profession",
    "country",
    "facebook",
    "instagram",
    "twitter",
    "linkedin",
)


class CV(Base):
    """
    Profile / résumé record, at most one per user.

    Content fields are untyped text so whatever the client writes is read
    back unchanged.
    """

    __tablename__ = "cv"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)

    nom = Column(Text)  # last name
    prenom = Column(Text)  # first name
    localisation = Column(Text)
    work_experience = Column(Text)
    work_experience_duree = Column(Text)
    education = Column(Text)
    education_duree = Column(Text)
    skills = Column(Text)
    languages = Column(Text)
    certifications_and_licenses = Column(Text)
    links = Column(Text)
    profession = Column(String)
    country = Column(String)

    # Social handles
    facebook = Column(String)
    instagram = Column(String)
    twitter = Column(String)
    linkedin = Column(String)

    # Relationships
    user = relationship("User", back_populates="cv")
