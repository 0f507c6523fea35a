"""Response shapes shared by several routers."""

from dataclasses import asdict

from indiereels.models.tables import GameProfile, Reel, Tag, User
from indiereels.services.feed import FeedReel


def tag_to_dict(tag: Tag) -> dict:
    return {"id": str(tag.id), "name": tag.name, "type": tag.type}


def game_to_dict(game: GameProfile) -> dict:
    return {
        "id": str(game.id),
        "developer_id": str(game.developer_id),
        "game_title": game.game_title,
        "description": game.description,
        "itch_url": game.itch_url,
        "thumbnail_url": game.thumbnail_url,
        "created_at": game.created_at.isoformat() if game.created_at else None,
        "updated_at": game.updated_at.isoformat() if game.updated_at else None,
    }


def reel_to_dict(reel: Reel) -> dict:
    """Developer view of a reel, display order included."""
    return {
        "id": str(reel.id),
        "game_profile_id": str(reel.game_profile_id),
        "video_url": reel.video_url,
        "caption": reel.caption,
        "order_index": reel.order_index,
        "tags": [tag_to_dict(t) for t in reel.tags],
        "created_at": reel.created_at.isoformat() if reel.created_at else None,
    }


def feed_reel_to_dict(reel: FeedReel) -> dict:
    """Gamer view of a reel."""
    data = asdict(reel)
    data["id"] = str(reel.id)
    data["game"]["id"] = str(reel.game.id)
    data["tags"] = [{"id": str(t.id), "name": t.name} for t in reel.tags]
    data["created_at"] = reel.created_at.isoformat() if reel.created_at else None
    if reel.saved_at is not None:
        data["saved_at"] = reel.saved_at.isoformat()
    else:
        data.pop("saved_at")
    return data


def user_to_dict(user: User) -> dict:
    return {
        "id": str(user.id),
        "email": user.email,
        "user_type": user.user_type,
        "developer_name": user.developer_name,
        "studio_name": user.studio_name,
        "bio": user.bio,
        "avatar_url": user.avatar_url,
    }
