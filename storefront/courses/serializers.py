"""
Storefront Course Serializers

Serializers:
- CourseVideoSerializer: video with derived id and thumbnail
- CourseVideoPreviewSerializer: title and thumbnail only
- CourseSerializer: catalog payload incl. ``is_enrolled`` for the caller
- CourseWriteSerializer: operator create/update with nested videos
- PlaybackVideoSerializer: video with embed URL for enrolled viewers

Author: CraftHub Development Team
Version: 1.0.0
"""

from typing import Any, Dict, List

from django.db import transaction
from rest_framework import serializers

from ..shop.pricing import format_price
from .models import Course, CourseVideo
from .youtube import embed_url, extract_youtube_id, thumbnail_url

NO_VIDEOS_MESSAGE = "Please add at least one video."
INVALID_VIDEO_URL_MESSAGE = "One or more video URLs are invalid."


class CourseVideoSerializer(serializers.ModelSerializer):
    title = serializers.CharField(max_length=200, required=False, allow_blank=True)
    youtube_url = serializers.CharField(max_length=500)

    class Meta:
        model = CourseVideo
        fields = ("id", "title", "youtube_url", "youtube_id", "thumbnail_url", "order")
        read_only_fields = ("id", "youtube_id", "thumbnail_url", "order")


class CourseVideoPreviewSerializer(serializers.ModelSerializer):
    class Meta:
        model = CourseVideo
        fields = ("id", "title", "thumbnail_url", "order")
        read_only_fields = fields


class CourseSerializer(serializers.ModelSerializer):
    """
    Course catalog payload. Expects ``enrolled_ids`` (set of course ids the
    caller paid for) in the serializer context.
    """

    price_display = serializers.SerializerMethodField()
    video_count = serializers.SerializerMethodField()
    videos = CourseVideoPreviewSerializer(many=True, read_only=True)
    is_enrolled = serializers.SerializerMethodField()

    class Meta:
        model = Course
        fields = (
            "id", "title", "description", "price", "price_display", "thumbnail_url",
            "video_count", "videos", "is_enrolled", "created_at",
        )
        read_only_fields = fields

    def get_price_display(self, obj: Course) -> str:
        return format_price(obj.price)

    def get_video_count(self, obj: Course) -> int:
        return len(obj.videos.all())

    def get_is_enrolled(self, obj: Course) -> bool:
        return obj.pk in self.context.get("enrolled_ids", set())


class CourseWriteSerializer(serializers.ModelSerializer):
    """
    Create/update a course together with its full list of videos.

    Every video URL must be a recognisable YouTube link; otherwise nothing
    is written. Thumbnails are derived from the video ids, and the course
    thumbnail falls back to the first video's.
    """

    videos = CourseVideoSerializer(many=True, required=True)
    thumbnail_url = serializers.URLField(max_length=500, required=False, allow_blank=True)

    class Meta:
        model = Course
        fields = ("id", "title", "description", "price", "thumbnail_url", "videos")
        read_only_fields = ("id",)

    def validate_price(self, value):
        if value <= 0:
            raise serializers.ValidationError("Price must be greater than zero.")
        return value

    def validate_videos(self, videos: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        if not videos:
            raise serializers.ValidationError(NO_VIDEOS_MESSAGE)
        prepared = []
        for position, video in enumerate(videos):
            video_id = extract_youtube_id(video.get("youtube_url"))
            if not video_id:
                raise serializers.ValidationError(INVALID_VIDEO_URL_MESSAGE)
            prepared.append({
                "title": (video.get("title") or "").strip() or f"Video {position + 1}",
                "youtube_url": video["youtube_url"].strip(),
                "youtube_id": video_id,
                "thumbnail_url": thumbnail_url(video_id),
                "order": position,
            })
        return prepared

    def _write_videos(self, course: Course, videos: List[Dict[str, Any]]) -> None:
        course.videos.all().delete()
        CourseVideo.objects.bulk_create(CourseVideo(course=course, **video) for video in videos)
        if not course.thumbnail_url and videos:
            course.thumbnail_url = videos[0]["thumbnail_url"]
            course.save(update_fields=["thumbnail_url", "updated_at"])

    @transaction.atomic
    def create(self, validated_data: Dict[str, Any]) -> Course:
        videos = validated_data.pop("videos")
        course = Course.objects.create(**validated_data)
        self._write_videos(course, videos)
        return course

    @transaction.atomic
    def update(self, instance: Course, validated_data: Dict[str, Any]) -> Course:
        videos = validated_data.pop("videos", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        if videos is not None:
            self._write_videos(instance, videos)
        return instance


class PlaybackVideoSerializer(serializers.ModelSerializer):
    embed_url = serializers.SerializerMethodField()

    class Meta:
        model = CourseVideo
        fields = ("id", "title", "youtube_id", "thumbnail_url", "embed_url", "order")
        read_only_fields = fields

    def get_embed_url(self, obj: CourseVideo) -> str:
        return embed_url(obj.youtube_id)
