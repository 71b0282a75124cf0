from marshmallow import ValidationError

from fitcoach.errors import ValidationFailed


def load_or_fail(schema, data, partial=False):
    """
    Load ``data`` with ``schema``, raising ValidationFailed on bad input.

    A partial load only relaxes the top-level fields; nested documents such
    as meal items are validated in full.
    """
    if data is None:
        raise ValidationFailed("Missing JSON body")
    try:
        if partial:
            return schema.load(data, partial=tuple(schema.load_fields))
        return schema.load(data)
    except ValidationError as err:
        raise ValidationFailed.from_messages(err.messages)
