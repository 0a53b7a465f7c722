from orderhub.lib.logger import logger


class Response:

    def __init__(self, code=200, message="", data=None, status=200):
        try:
            self.status = status
            self.message = message
            self.data = data if data is not None else {}
            self.code = code
        except Exception as e:
            logger.error(f"Error in Response __init__: {e}")
            self.status = 500
            self.message = "Internal Server Error"
            self.data = {}
            self.code = 500

    def to_dict(self):
        return {
            "code": self.code,
            "message": self.message,
            "data": self.data,
        }, self.status
