from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

AWARD_ROLES = ("winner", "firstRunnerUp", "secondRunnerUp")
AwardRole = Literal["winner", "firstRunnerUp", "secondRunnerUp"]


class MediaRef(BaseModel):
    """Stored media entry. Field names are camelCase to match storage."""

    url: str                            # public address served from the bucket / CDN
    canonicalKey: Optional[str] = None  # media-store object key; None for direct-URL entries
    caption: Optional[str] = None       # photos only


# ── Boundary media references ──────────────────────────────────────────────────
# Whatever shape the client or the upload path hands us, it is turned into a
# MediaRef once, here, and nothing downstream looks at ``kind`` again.

class DirectUrlRef(BaseModel):
    kind: Literal["url"] = "url"
    url: str

    def to_media_ref(self, caption: Optional[str] = None) -> MediaRef:
        return MediaRef(url=self.url, caption=caption)


class UploadedRef(BaseModel):
    kind: Literal["upload"] = "upload"
    url: str
    key: str

    def to_media_ref(self, caption: Optional[str] = None) -> MediaRef:
        return MediaRef(url=self.url, canonicalKey=self.key, caption=caption)


MediaRefInput = Annotated[Union[DirectUrlRef, UploadedRef], Field(discriminator="kind")]


# ── Year record ────────────────────────────────────────────────────────────────

class AwardSlot(BaseModel):
    name: str = ""
    position: Optional[str] = None   # role label, e.g. "firstRunnerUp"
    photo: Optional[MediaRef] = None


class AwardCategory(BaseModel):
    category: str
    winner: Optional[AwardSlot] = None
    firstRunnerUp: Optional[AwardSlot] = None
    secondRunnerUp: Optional[AwardSlot] = None

    def slots(self) -> list[AwardSlot]:
        """Populated slots in rank order."""
        return [s for s in (self.winner, self.firstRunnerUp, self.secondRunnerUp) if s is not None]


class YearRecord(BaseModel):
    year: int
    videoLink: Optional[str] = None
    photos: list[MediaRef] = []
    awards: list[AwardCategory] = []
    partners: list[MediaRef] = []
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None

    def find_category(self, category: str) -> Optional[AwardCategory]:
        for award in self.awards:
            if award.category == category:
                return award
        return None


class YearSummary(BaseModel):
    year: int
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


# ── Auth ───────────────────────────────────────────────────────────────────────

class Principal(BaseModel):
    """Identity attached to a request once the gate accepts it."""

    id: Optional[str] = None   # None for the legacy shared-secret principal
    email: str
    role: str = "admin"


class AdminAccount(BaseModel):
    id: str
    email: str
    passwordHash: str
    role: str = "admin"
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None

    def to_principal(self) -> Principal:
        return Principal(id=self.id, email=self.email, role=self.role)


class Credentials(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    token: str
    user: Principal


# ── Requests ───────────────────────────────────────────────────────────────────

class VideoLinkUpdate(BaseModel):
    videoLink: str
