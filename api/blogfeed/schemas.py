from pydantic import BaseModel
from typing import Optional, List

class PostSummary(BaseModel):
    title: str = ""
    link: str = ""
    pubDate: str = ""
    excerpt: str = ""
    image: Optional[str] = None

class BlogResponse(BaseModel):
    posts: List[PostSummary]
    error: Optional[str] = None

    def to_json(self) -> str:
        # error is only present on the wire when something went wrong
        return self.model_dump_json(exclude={"error"} if self.error is None else None)
