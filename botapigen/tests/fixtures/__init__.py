"""Test fixtures for botapigen tests.

This module provides sample bot API specifications and utilities for testing
the code generation functionality.
"""

import json

# Smallest document the parser accepts
MINIMAL_SPEC = {'types': {}, 'methods': {}}

# One type with a two-member union field
UNION_FIELD_SPEC = {
    'types': {
        'Foo': {
            'name': 'Foo',
            'fields': [
                {
                    'name': 'x',
                    'types': ['String', 'Integer'],
                    'required': True,
                    'description': '',
                }
            ],
        }
    },
    'methods': {},
}

# Two types using the same union with the members in different order
SHARED_UNION_SPEC = {
    'types': {
        'A': {
            'name': 'A',
            'fields': [{'name': 'p', 'types': ['Integer', 'String'], 'required': True}],
        },
        'B': {
            'name': 'B',
            'fields': [{'name': 'q', 'types': ['String', 'Integer'], 'required': False}],
        },
    },
    'methods': {},
}

# Optional parameter declared before the required one
PARAM_ORDER_SPEC = {
    'types': {},
    'methods': {
        'doThing': {
            'name': 'doThing',
            'fields': [
                {'name': 'b', 'types': ['String'], 'required': False},
                {'name': 'a', 'types': ['Integer'], 'required': True},
            ],
            'returns': ['Boolean'],
        }
    },
}

# A field referencing a type that is never declared
UNKNOWN_TYPE_SPEC = {
    'types': {
        'Foo': {
            'name': 'Foo',
            'fields': [{'name': 'y', 'types': ['Bogus'], 'required': True}],
        }
    },
    'methods': {},
}

# A union that only appears in a method signature
METHOD_UNION_SPEC = {
    'types': {},
    'methods': {
        'sendMessage': {
            'name': 'sendMessage',
            'fields': [
                {'name': 'chat_id', 'types': ['Integer', 'String'], 'required': True},
                {'name': 'text', 'types': ['String'], 'required': True},
            ],
            'returns': ['Boolean'],
        }
    },
}


def _user_fields():
    return [
        {'name': 'id', 'types': ['Integer'], 'required': True},
        {'name': 'is_bot', 'types': ['Boolean'], 'required': True},
        {'name': 'first_name', 'types': ['String'], 'required': True},
        {'name': 'username', 'types': ['String'], 'required': False},
    ]


def _chat_id(required=True):
    return {
        'name': 'chat_id',
        'types': ['Integer', 'String'],
        'required': required,
        'description': 'Unique identifier for the target chat or username of the target channel',
    }


# A trimmed down Telegram-like bot API
BOT_API_SPEC = {
    'version': 'Bot API 7.0',
    'release_date': '2023-12-29',
    'changelog': 'https://core.telegram.org/bots/api-changelog',
    'types': {
        'Update': {
            'name': 'Update',
            'description': ['This object represents an incoming update.'],
            'fields': [
                {
                    'name': 'update_id',
                    'types': ['Integer'],
                    'required': True,
                    'description': "The update's unique identifier.",
                },
                {'name': 'message', 'types': ['Message'], 'required': False},
                {'name': 'edited_message', 'types': ['Message'], 'required': False},
                {'name': 'callback_query', 'types': ['CallbackQuery'], 'required': False},
            ],
        },
        'User': {
            'name': 'User',
            'description': ['This object represents a Telegram user or bot.'],
            'fields': _user_fields(),
        },
        'Chat': {
            'name': 'Chat',
            'description': ['This object represents a chat.'],
            'fields': [
                {'name': 'id', 'types': ['Integer'], 'required': True},
                {'name': 'type', 'types': ['String'], 'required': True},
                {'name': 'title', 'types': ['String'], 'required': False},
            ],
        },
        'Message': {
            'name': 'Message',
            'description': ['This object represents a message.'],
            'fields': [
                {'name': 'message_id', 'types': ['Integer'], 'required': True},
                {
                    'name': 'from',
                    'types': ['User'],
                    'required': False,
                    'description': 'Sender of the message',
                },
                {'name': 'chat', 'types': ['Chat'], 'required': True},
                {'name': 'date', 'types': ['Integer'], 'required': True},
                {'name': 'text', 'types': ['String'], 'required': False},
                {'name': 'photo', 'types': ['Array of PhotoSize'], 'required': False},
                {'name': 'reply_to_message', 'types': ['Message'], 'required': False},
            ],
        },
        'PhotoSize': {
            'name': 'PhotoSize',
            'fields': [
                {'name': 'file_id', 'types': ['String'], 'required': True},
                {'name': 'width', 'types': ['Integer'], 'required': True},
                {'name': 'height', 'types': ['Integer'], 'required': True},
            ],
        },
        'CallbackQuery': {
            'name': 'CallbackQuery',
            'fields': [
                {'name': 'id', 'types': ['String'], 'required': True},
                {'name': 'from', 'types': ['User'], 'required': True},
                {'name': 'message', 'types': ['Message'], 'required': False},
                {'name': 'data', 'types': ['String'], 'required': False},
            ],
        },
        'ChatMember': {
            'name': 'ChatMember',
            'description': [
                'This object contains information about one member of a chat.'
            ],
            'subtypes': ['ChatMemberOwner', 'ChatMemberMember'],
        },
        'ChatMemberOwner': {
            'name': 'ChatMemberOwner',
            'fields': [
                {'name': 'status', 'types': ['String'], 'required': True},
                {'name': 'user', 'types': ['User'], 'required': True},
            ],
            'subtype_of': ['ChatMember'],
        },
        'ChatMemberMember': {
            'name': 'ChatMemberMember',
            'fields': [
                {'name': 'status', 'types': ['String'], 'required': True},
                {'name': 'user', 'types': ['User'], 'required': True},
            ],
            'subtype_of': ['ChatMember'],
        },
        'InputFile': {
            'name': 'InputFile',
            'description': [
                'This object represents the contents of a file to be uploaded.'
            ],
        },
        'InputMediaPhoto': {
            'name': 'InputMediaPhoto',
            'fields': [
                {'name': 'type', 'types': ['String'], 'required': True},
                {'name': 'media', 'types': ['InputFile', 'String'], 'required': True},
                {'name': 'caption', 'types': ['String'], 'required': False},
            ],
        },
        'InputMediaVideo': {
            'name': 'InputMediaVideo',
            'fields': [
                {'name': 'type', 'types': ['String'], 'required': True},
                {'name': 'media', 'types': ['String', 'InputFile'], 'required': True},
                {'name': 'thumbnail', 'types': ['InputFile', 'String'], 'required': False},
            ],
        },
    },
    'methods': {
        'getUpdates': {
            'name': 'getUpdates',
            'description': ['Use this method to receive incoming updates.'],
            'fields': [
                {'name': 'offset', 'types': ['Integer'], 'required': False},
                {'name': 'limit', 'types': ['Integer'], 'required': False},
            ],
            'returns': ['Array of Update'],
        },
        'getMe': {
            'name': 'getMe',
            'description': ['A simple method for testing your bot\'s auth token.'],
            'returns': ['User'],
        },
        'sendMessage': {
            'name': 'sendMessage',
            'description': ['Use this method to send text messages.'],
            'fields': [
                _chat_id(),
                {'name': 'disable_notification', 'types': ['Boolean'], 'required': False},
                {
                    'name': 'text',
                    'types': ['String'],
                    'required': True,
                    'description': 'Text of the message to be sent',
                },
            ],
            'returns': ['Message'],
        },
        'sendPhoto': {
            'name': 'sendPhoto',
            'fields': [
                _chat_id(),
                {'name': 'photo', 'types': ['InputFile', 'String'], 'required': True},
                {'name': 'caption', 'types': ['String'], 'required': False},
            ],
            'returns': ['Message'],
        },
        'sendMediaGroup': {
            'name': 'sendMediaGroup',
            'fields': [
                _chat_id(),
                {
                    'name': 'media',
                    'types': ['Array of InputMediaPhoto', 'Array of InputMediaVideo'],
                    'required': True,
                },
            ],
            'returns': ['Array of Message'],
        },
        'editMessageText': {
            'name': 'editMessageText',
            'fields': [
                _chat_id(required=False),
                {'name': 'text', 'types': ['String'], 'required': True},
            ],
            'returns': ['Message', 'True'],
        },
        'getChatMember': {
            'name': 'getChatMember',
            'fields': [
                _chat_id(),
                {'name': 'user_id', 'types': ['Integer'], 'required': True},
            ],
            'returns': ['ChatMember'],
        },
        'setChatPhoto': {
            'name': 'setChatPhoto',
            'fields': [
                _chat_id(),
                {'name': 'photo', 'types': ['InputFile'], 'required': True},
            ],
            'returns': ['True'],
        },
    },
}


def to_json(spec: dict) -> str:
    """Serialize a fixture the way a specification file stores it."""
    return json.dumps(spec, indent=2)


def write_spec(directory, spec: dict, filename: str = 'api.json'):
    """Write a fixture to ``directory`` and return its path."""
    path = directory / filename
    path.write_text(to_json(spec))
    return path
