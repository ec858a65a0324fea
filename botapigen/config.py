import os
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from botapigen.exceptions import ConfigurationError

DEFAULT_FILENAMES = ['botapigen.yaml', 'botapigen.yml']


class GeneratorConfig(BaseModel):
    """Options that change the shape of the generated source."""

    envelope_type: str | None = Field(
        'Update',
        description='Type whose optional event fields are collapsed into a payload union.',
    )

    input_file_type: str = Field(
        'InputFile',
        description='Pseudo-type for uploads; emitted as bytes-or-reference union.',
    )

    union_prefix: str = Field(
        'E', description='Prefix that marks synthesized union types.'
    )

    methods_class: str = Field(
        'Methods', description='Class name for the generated method bindings.'
    )

    async_methods: bool = Field(
        True, description='Whether to also emit an async bindings class.'
    )

    types_module: str = Field(
        'types', description='Module name the method bindings import types from.'
    )


class DocumentConfig(BaseModel):
    """Represents a single specification document to be processed."""

    source: str = Field(..., description='Path or URL to the bot API specification.')

    output: str = Field(..., description='Output directory for the generated code.')

    types_file: str = Field(
        'types.py', description='File name for generated type definitions.'
    )

    methods_file: str = Field(
        'methods.py', description='File name for generated method bindings.'
    )

    generator: GeneratorConfig = Field(
        default_factory=GeneratorConfig,
        description='Options passed to the generator.',
    )


class CodegenConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='BOTAPIGEN_')

    documents: list[DocumentConfig] = Field(
        ..., description='List of specification documents to process.'
    )

    generate_methods: bool = Field(
        True, description='Whether to write the method bindings module.'
    )


def load_yaml(path: str | Path) -> dict:
    import yaml

    return yaml.load(Path(path).read_text(), Loader=yaml.FullLoader)


def get_config(path: str | None = None) -> CodegenConfig:
    """Load configuration from a file or from pyproject.toml."""
    if path:
        if not Path(path).exists():
            raise ConfigurationError('Configuration file not found', config_path=path)
        return CodegenConfig.model_validate(load_yaml(path))

    cwd = os.getcwd()

    for filename in DEFAULT_FILENAMES:
        path = Path(cwd) / filename
        if path.exists():
            return CodegenConfig.model_validate(load_yaml(path))

    path = Path(os.getcwd()) / 'pyproject.toml'

    if path.exists():
        import tomllib

        pyproject = tomllib.loads(path.read_text())
        tools = pyproject.get('tool', {})

        if 'botapigen' in tools:
            return CodegenConfig.model_validate(tools['botapigen'])

    raise ConfigurationError('config not found', config_path=cwd)
