from datetime import datetime
from datetime import timezone

from bson import ObjectId
from mongoengine import DateTimeField, Document, EmbeddedDocument

from orderhub.lib.logger import logger


def format_utc_datetime(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def to_json_value(value):
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return format_utc_datetime(value)
    if isinstance(value, dict):
        return {key: to_json_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [to_json_value(item) for item in value]
    return value


class BaseEmbeddedDocument(EmbeddedDocument):
    meta = {"abstract": True}

    def to_json(self):
        return to_json_value(self.to_mongo().to_dict())


class BaseDocument(Document):
    meta = {
        "abstract": True,
    }
    created_at = DateTimeField(default=datetime.utcnow)
    updated_at = DateTimeField(default=datetime.utcnow)

    to_json_filter = ()

    def save(self, *args, **kwargs):
        try:
            self.updated_at = datetime.utcnow()
            return super(BaseDocument, self).save(*args, **kwargs)
        except Exception as e:
            logger.error(f"Error saving {self.__class__.__name__}: {e}")
            raise

    def to_dict(self):
        return self.to_mongo().to_dict()

    def to_json(self):
        response = {}
        for column, value in self.to_dict().items():
            if column in self.to_json_filter:
                continue
            if column == "_id":
                response["id"] = str(value)
            else:
                response[column] = to_json_value(value)

        return response
