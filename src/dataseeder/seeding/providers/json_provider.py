"""
JSON file data provider.

Reads a JSON array of objects and turns every object into an instance of a
mapped SQLAlchemy model. Keys are matched to the model's column attributes
case- and underscore-insensitively, so ``dateOfBirth``, ``DateOfBirth`` and
``date_of_birth`` all land on ``date_of_birth``. Values are coerced to the
column type where JSON has no native representation: ISO strings become
``date``/``datetime`` and numbers become ``Decimal`` for numeric columns.

Example:
    >>> options = JsonDataProviderOptions(base_directory="seed-data")
    >>> provider = JsonDataProvider(Author, "authors", options)
    >>> authors = await provider.get_seed_data()
"""

import json
import os
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Type, Union

import aiofiles
from pydantic import BaseModel
from sqlalchemy import Column, inspect
from sqlalchemy.sql import sqltypes

from dataseeder.core.exceptions.custom_exceptions import DataProviderError
from dataseeder.core.logging.logger import get_logger
from dataseeder.seeding.base.data_provider import DataProvider


class JsonDataProviderOptions(BaseModel):
    """Where seed files live and how they are read"""

    base_directory: Optional[Path] = None
    clean_existing_data: bool = True
    validate_schema: bool = True
    file_extension: str = ".json"


class JsonDataProvider(DataProvider):
    """
    Loads entities of one model from a JSON seed file.

    Args:
        model: Mapped SQLAlchemy model class to instantiate
        file_path: Seed file, relative to ``base_directory`` when one is set;
            the extension is appended when missing
        options: Provider options
    """

    def __init__(
        self,
        model: Type[Any],
        file_path: Union[str, Path],
        options: Optional[JsonDataProviderOptions] = None,
    ):
        self.model = model
        self.options = options or JsonDataProviderOptions()
        self.file_path = self.resolve_path(file_path, self.options)
        self.logger = get_logger(__name__)
        self._columns: Optional[Dict[str, Tuple[str, Column]]] = None

    @staticmethod
    def resolve_path(
        file_path: Union[str, Path], options: JsonDataProviderOptions
    ) -> Path:
        path = str(file_path)
        if options.base_directory is not None:
            path = os.path.join(str(options.base_directory), path)

        extension = options.file_extension
        if extension and not path.lower().endswith(extension.lower()):
            path = path + extension

        return Path(path)

    @property
    def should_clean_existing_data(self) -> bool:
        return self.options.clean_existing_data

    async def get_seed_data(self) -> List[Any]:
        records = await self.read_records()

        if not records:
            self.logger.warning(f"No entities found in JSON file: {self.file_path}")
            return []

        entities = [self.build_entity(record) for record in records]
        self.logger.info(
            f"Successfully loaded {len(entities)} entities from JSON file",
            file=str(self.file_path),
        )
        return entities

    async def read_records(self) -> List[Dict[str, Any]]:
        """
        Read the seed file as raw JSON objects.

        Raises:
            FileNotFoundError: If the seed file does not exist
            DataProviderError: If the file is not a JSON array of objects
        """
        self.logger.info(f"Reading seed data from JSON file: {self.file_path}")

        if not self.file_path.is_file():
            raise FileNotFoundError(f"JSON seed file not found: {self.file_path}")

        async with aiofiles.open(self.file_path, "r", encoding="utf-8") as f:
            content = await f.read()

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            self.logger.error(
                f"Error deserializing JSON data from file: {self.file_path}",
                error=str(e),
            )
            raise DataProviderError(
                f"Invalid JSON in seed file {self.file_path}: {e.msg}",
                details={"file": str(self.file_path), "line": e.lineno},
            ) from e

        if not isinstance(data, list):
            raise DataProviderError(
                f"Seed file {self.file_path} must contain a JSON array",
                details={"file": str(self.file_path)},
            )

        for index, record in enumerate(data):
            if not isinstance(record, dict):
                raise DataProviderError(
                    f"Item {index} in seed file {self.file_path} is not an object",
                    details={"file": str(self.file_path), "index": index},
                )

        return data

    def build_entity(self, record: Dict[str, Any]) -> Any:
        """Instantiate the model from one JSON object"""
        columns = self._column_map()
        values = {}

        for raw_key, value in record.items():
            match = columns.get(_normalize(raw_key))
            if match is None:
                if self.options.validate_schema:
                    raise DataProviderError(
                        f"Unknown field '{raw_key}' for {self.model.__name__} "
                        f"in {self.file_path}",
                        details={"file": str(self.file_path), "field": raw_key},
                    )
                continue

            attr_key, column = match
            values[attr_key] = self._coerce(value, column, raw_key)

        return self.model(**values)

    def _column_map(self) -> Dict[str, Tuple[str, Column]]:
        if self._columns is None:
            self._columns = {
                _normalize(attr.key): (attr.key, attr.columns[0])
                for attr in inspect(self.model).column_attrs
            }
        return self._columns

    def _coerce(self, value: Any, column: Column, raw_key: str) -> Any:
        if value is None:
            return None

        column_type = column.type
        try:
            if isinstance(column_type, sqltypes.DateTime) and isinstance(value, str):
                return _parse_datetime(value)
            if isinstance(column_type, sqltypes.Date) and isinstance(value, str):
                return _parse_datetime(value).date()
            if (
                isinstance(column_type, sqltypes.Numeric)
                and not isinstance(column_type, sqltypes.Float)
                and isinstance(value, (int, float))
                and not isinstance(value, bool)
            ):
                return Decimal(str(value))
        except ValueError as e:
            raise DataProviderError(
                f"Invalid value for '{raw_key}' in {self.file_path}: {value!r}",
                details={"file": str(self.file_path), "field": raw_key},
            ) from e

        return value


def _normalize(key: str) -> str:
    return key.replace("_", "").lower()


def _parse_datetime(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)
