from pydantic import BaseModel


class ContentBody(BaseModel):
    """Comment and tweet bodies. Blank content is rejected by the service with a 400."""
    content: str | None = None


class PlaylistBody(BaseModel):
    name: str | None = None
    description: str | None = None
