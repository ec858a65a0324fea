"""Tests for parsing specifications into the in-memory model."""

import json

import pytest

from botapigen.codegen.schema import (
    ArrayOf,
    Reference,
    Scalar,
    Spec,
    UnionOf,
    parse,
    parse_document,
    parse_type_tokens,
    referenced_names,
)
from botapigen.exceptions import MalformedSchemaError, UnknownTypeError

from .fixtures import (
    BOT_API_SPEC,
    MINIMAL_SPEC,
    PARAM_ORDER_SPEC,
    UNION_FIELD_SPEC,
    UNKNOWN_TYPE_SPEC,
    to_json,
)


class TestParseTypeTokens:
    """Tests for turning type tokens into TypeRefs."""

    def test_scalar(self):
        assert parse_type_tokens(['Integer'], 'x') == Scalar('Integer')

    def test_true_is_a_scalar(self):
        ref = parse_type_tokens(['True'], 'x')
        assert ref == Scalar('True')
        assert ref.python_type == 'bool'

    def test_reference(self):
        assert parse_type_tokens(['Message'], 'x') == Reference('Message')

    def test_nested_arrays(self):
        ref = parse_type_tokens(['Array of Array of PhotoSize'], 'x')
        assert ref == ArrayOf(ArrayOf(Reference('PhotoSize')))

    def test_union_keeps_declared_order(self):
        ref = parse_type_tokens(['String', 'Integer'], 'x')
        assert ref == UnionOf((Scalar('String'), Scalar('Integer')))

    def test_duplicate_tokens_collapse(self):
        """A repeated token does not create a union."""
        assert parse_type_tokens(['String', 'String'], 'x') == Scalar('String')

    def test_array_union_is_factored(self):
        ref = parse_type_tokens(['Array of InputMediaPhoto', 'Array of InputMediaVideo'], 'x')
        assert ref == ArrayOf(
            UnionOf((Reference('InputMediaPhoto'), Reference('InputMediaVideo')))
        )

    def test_mixed_array_union_is_not_factored(self):
        ref = parse_type_tokens(['Array of String', 'String'], 'x')
        assert ref == UnionOf((ArrayOf(Scalar('String')), Scalar('String')))

    def test_single_string_token(self):
        assert parse_type_tokens('Boolean', 'x') == Scalar('Boolean')

    @pytest.mark.parametrize('tokens', [[], None, [''], [3], ['Not A Name']])
    def test_invalid_tokens(self, tokens):
        with pytest.raises(MalformedSchemaError) as exc_info:
            parse_type_tokens(tokens, 'types.Foo.fields[0]')
        assert exc_info.value.path == 'types.Foo.fields[0]'

    def test_union_needs_two_members(self):
        with pytest.raises(ValueError):
            UnionOf((Scalar('String'),))


class TestReferencedNames:
    """Tests for walking the names inside a TypeRef."""

    def test_walks_arrays_and_unions(self):
        ref = UnionOf((ArrayOf(Reference('A')), Scalar('String')))
        assert list(referenced_names(ref)) == ['A', 'String']


class TestParse:
    """Tests for parsing whole documents."""

    def test_minimal(self):
        spec = parse(to_json(MINIMAL_SPEC))
        assert isinstance(spec, Spec)
        assert len(spec.types) == 0
        assert len(spec.methods) == 0
        assert spec.version is None

    def test_bytes_input(self):
        spec = parse(to_json(UNION_FIELD_SPEC).encode())
        assert list(spec.types) == ['Foo']

    def test_union_field(self):
        spec = parse(to_json(UNION_FIELD_SPEC))
        field = spec.types['Foo'].fields[0]
        assert field.name == 'x'
        assert field.required is True
        assert field.type == UnionOf((Scalar('String'), Scalar('Integer')))

    def test_metadata(self):
        spec = parse(to_json(BOT_API_SPEC))
        assert spec.version == 'Bot API 7.0'
        assert spec.release_date == '2023-12-29'
        assert spec.changelog == 'https://core.telegram.org/bots/api-changelog'

    def test_declaration_order_is_preserved(self):
        spec = parse(to_json(BOT_API_SPEC))
        assert list(spec.types) == list(BOT_API_SPEC['types'])
        assert list(spec.methods) == list(BOT_API_SPEC['methods'])

    def test_description_lines_are_joined(self):
        spec = parse(to_json(BOT_API_SPEC))
        assert spec.types['User'].description == (
            'This object represents a Telegram user or bot.'
        )

    def test_subtypes(self):
        spec = parse(to_json(BOT_API_SPEC))
        chat_member = spec.types['ChatMember']
        assert chat_member.subtypes == ('ChatMemberOwner', 'ChatMemberMember')
        assert chat_member.is_abstract
        assert spec.types['ChatMemberOwner'].subtype_of == ('ChatMember',)
        assert not spec.types['ChatMemberOwner'].is_abstract

    def test_method_params_and_returns(self):
        spec = parse(to_json(PARAM_ORDER_SPEC))
        method = spec.methods['doThing']
        assert [p.name for p in method.params] == ['b', 'a']
        assert method.returns == Scalar('Boolean')

    def test_method_without_fields(self):
        spec = parse(to_json(BOT_API_SPEC))
        assert spec.methods['getMe'].params == ()

    def test_union_return(self):
        spec = parse(to_json(BOT_API_SPEC))
        assert spec.methods['editMessageText'].returns == UnionOf(
            (Reference('Message'), Scalar('True'))
        )

    def test_forward_references_are_allowed(self):
        spec = parse(
            json.dumps(
                {
                    'types': {
                        'A': {'fields': [{'name': 'b', 'types': ['B'], 'required': True}]},
                        'B': {'fields': [{'name': 'a', 'types': ['A'], 'required': False}]},
                    },
                    'methods': {},
                }
            )
        )
        assert spec.types['A'].fields[0].type == Reference('B')

    def test_spec_is_read_only(self):
        spec = parse(to_json(UNION_FIELD_SPEC))
        with pytest.raises(TypeError):
            spec.types['Bar'] = spec.types['Foo']

    def test_parse_document_accepts_decoded_dict(self):
        spec = parse_document(UNION_FIELD_SPEC)
        assert 'Foo' in spec.types
        assert spec.is_known('Foo')
        assert spec.is_known('Integer')
        assert not spec.is_known('Bar')


class TestUnknownTypes:
    """Tests for references to undeclared types."""

    def test_unknown_field_type(self):
        with pytest.raises(UnknownTypeError) as exc_info:
            parse(to_json(UNKNOWN_TYPE_SPEC))
        assert exc_info.value.type_name == 'Bogus'
        assert exc_info.value.path == 'types.Foo.y'

    def test_unknown_param_type(self):
        document = {
            'types': {},
            'methods': {
                'm': {'fields': [{'name': 'p', 'types': ['Nope'], 'required': True}], 'returns': ['True']}
            },
        }
        with pytest.raises(UnknownTypeError) as exc_info:
            parse_document(document)
        assert exc_info.value.path == 'methods.m.p'

    def test_unknown_return_type(self):
        document = {'types': {}, 'methods': {'m': {'returns': ['Array of Nope']}}}
        with pytest.raises(UnknownTypeError) as exc_info:
            parse_document(document)
        assert exc_info.value.type_name == 'Nope'
        assert exc_info.value.path == 'methods.m.returns'

    def test_unknown_subtype(self):
        document = {'types': {'A': {'subtypes': ['Missing']}}, 'methods': {}}
        with pytest.raises(UnknownTypeError) as exc_info:
            parse_document(document)
        assert exc_info.value.path == 'types.A'


class TestMalformed:
    """Tests for documents that do not match the data model."""

    def test_invalid_json(self):
        with pytest.raises(MalformedSchemaError, match='invalid JSON'):
            parse('{"types": ')

    def test_invalid_utf8_bytes(self):
        with pytest.raises(MalformedSchemaError, match='invalid JSON'):
            parse(b'{"types": {}, "methods": {"\xff": 1}}')

    def test_deeply_nested_arrays(self):
        token = 'Array of ' * 5000 + 'String'
        with pytest.raises(MalformedSchemaError, match='nested deeper'):
            parse_type_tokens([token], 'types.Foo.fields[0]')

    def test_not_an_object(self):
        with pytest.raises(MalformedSchemaError):
            parse('[]')

    def test_duplicate_type_names(self):
        text = '{"types": {"A": {}, "A": {}}, "methods": {}}'
        with pytest.raises(MalformedSchemaError, match='duplicate key'):
            parse(text)

    def test_duplicate_field_names(self):
        document = {
            'types': {
                'A': {
                    'fields': [
                        {'name': 'x', 'types': ['String'], 'required': True},
                        {'name': 'x', 'types': ['Integer'], 'required': True},
                    ]
                }
            },
            'methods': {},
        }
        with pytest.raises(MalformedSchemaError, match='duplicate field'):
            parse_document(document)

    def test_missing_returns(self):
        with pytest.raises(MalformedSchemaError, match='missing return type'):
            parse_document({'types': {}, 'methods': {'getMe': {}}})

    def test_name_mismatch(self):
        with pytest.raises(MalformedSchemaError, match='does not match key'):
            parse_document({'types': {'A': {'name': 'B'}}, 'methods': {}})

    def test_required_must_be_boolean(self):
        document = {
            'types': {'A': {'fields': [{'name': 'x', 'types': ['String'], 'required': 'yes'}]}},
            'methods': {},
        }
        with pytest.raises(MalformedSchemaError, match='required must be a boolean'):
            parse_document(document)

    def test_scalar_shadowing(self):
        with pytest.raises(MalformedSchemaError, match='shadows a scalar'):
            parse_document({'types': {'String': {}}, 'methods': {}})

    def test_types_must_be_an_object(self):
        with pytest.raises(MalformedSchemaError) as exc_info:
            parse_document({'types': [], 'methods': {}})
        assert exc_info.value.path == 'types'

    def test_error_message_includes_path(self):
        with pytest.raises(MalformedSchemaError) as exc_info:
            parse_document({'types': {'A': {'fields': 'nope'}}, 'methods': {}})
        assert "at 'types.A.fields'" in str(exc_info.value)
