"""
Schema validation for the neighbourhood snapshot and derived tables.

- Snapshot validated (columns, dtypes, NA rules, uniqueness) on read.
- Schema drift becomes an immediate local failure.
- hood_id is always pandas nullable Int64 with no NA values.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Set

import pandas as pd

from hood_crime.categories import (
    CATEGORIES,
    DEFAULT_YEARS,
    ID_COLUMN,
    KEY_COLUMNS,
    NAME_COLUMN,
    TOTAL_PREFIX,
    all_yearly_columns,
)
from hood_crime.errors import SchemaError


# =============================================================================
# Schema Definition
# =============================================================================

@dataclass
class ColumnSpec:
    """Specification for a single column."""
    name: str
    dtype: Optional[str] = None  # "Int64", "int64", "float64", "string"
    nullable: bool = True
    unique: bool = False
    allowed_values: Optional[Set[Any]] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None


@dataclass
class Schema:
    """Schema specification for a DataFrame."""
    name: str
    columns: List[ColumnSpec]
    required_columns: List[str] = field(default_factory=list)
    row_count: Optional[int] = None
    min_rows: int = 0

    def __post_init__(self):
        if not self.required_columns:
            self.required_columns = [c.name for c in self.columns if not c.nullable]


# =============================================================================
# Predefined Schemas
# =============================================================================

KEYS_SCHEMA = Schema(
    name="neighbourhood_keys",
    columns=[
        ColumnSpec(ID_COLUMN, dtype="Int64", nullable=False, unique=True),
        ColumnSpec(NAME_COLUMN, dtype="string", nullable=False, unique=True),
    ],
    min_rows=1,
)


def snapshot_schema(
    categories: Iterable[str] = CATEGORIES,
    years: Iterable[int] = DEFAULT_YEARS,
) -> Schema:
    """Raw snapshot: keys plus every yearly count column (cells may be missing)."""
    count_specs = [
        ColumnSpec(col, nullable=True, min_value=0)
        for col in all_yearly_columns(categories, years)
    ]
    return Schema(
        name="neighbourhood_snapshot",
        columns=KEYS_SCHEMA.columns + count_specs,
        required_columns=KEY_COLUMNS + [c.name for c in count_specs],
        min_rows=1,
    )


def normalized_schema(
    categories: Iterable[str] = CATEGORIES,
    years: Iterable[int] = DEFAULT_YEARS,
) -> Schema:
    """Normalized snapshot: every yearly count is a non-missing integer >= 0."""
    count_specs = [
        ColumnSpec(col, dtype="int64", nullable=False, min_value=0)
        for col in all_yearly_columns(categories, years)
    ]
    return Schema(
        name="neighbourhood_normalized",
        columns=KEYS_SCHEMA.columns + count_specs,
        min_rows=1,
    )


# =============================================================================
# Validation Functions
# =============================================================================

def validate_column(
    df: pd.DataFrame,
    spec: ColumnSpec,
    context: str = "",
) -> List[str]:
    """
    Validate a single column against its specification.

    Args:
        df: DataFrame containing the column
        spec: Column specification
        context: Optional context for error messages

    Returns:
        List of error messages (empty if valid)
    """
    errors = []
    col_name = spec.name

    if col_name not in df.columns:
        errors.append(f"Missing column: {col_name}")
        return errors

    col = df[col_name]

    if spec.dtype is not None:
        if spec.dtype in ("Int64", "int64"):
            if not pd.api.types.is_integer_dtype(col):
                errors.append(f"Column {col_name}: expected {spec.dtype}, got {col.dtype}")
        elif spec.dtype == "float64":
            if not pd.api.types.is_float_dtype(col):
                errors.append(f"Column {col_name}: expected float64, got {col.dtype}")
        elif spec.dtype == "string":
            is_str = col.map(lambda v: isinstance(v, str)).astype(bool)
            non_str = col.notna() & ~is_str
            if non_str.any():
                errors.append(f"Column {col_name}: {int(non_str.sum())} non-string values")

    if not spec.nullable and col.isna().any():
        na_count = col.isna().sum()
        errors.append(f"Column {col_name}: {na_count} NA values not allowed")

    if spec.unique and col.dropna().duplicated().any():
        dups = col[col.duplicated(keep=False) & col.notna()].unique()[:5]
        errors.append(f"Column {col_name}: duplicate values not allowed {list(dups)}")

    if spec.allowed_values is not None:
        invalid = ~col.isin(spec.allowed_values) & col.notna()
        if invalid.any():
            invalid_vals = col[invalid].unique()[:5]
            errors.append(f"Column {col_name}: invalid values {list(invalid_vals)}")

    if spec.min_value is not None or spec.max_value is not None:
        numeric = pd.to_numeric(col, errors="coerce")
        if spec.min_value is not None and ((numeric < spec.min_value) & numeric.notna()).any():
            errors.append(f"Column {col_name}: values below min {spec.min_value}")
        if spec.max_value is not None and ((numeric > spec.max_value) & numeric.notna()).any():
            errors.append(f"Column {col_name}: values above max {spec.max_value}")

    return errors


def validate_schema(
    df: pd.DataFrame,
    schema: Schema,
    context: str = "",
    raise_on_error: bool = True,
) -> List[str]:
    """
    Validate a DataFrame against a schema.

    Args:
        df: DataFrame to validate
        schema: Schema specification
        context: Optional context for error messages
        raise_on_error: If True, raise SchemaError on validation failure

    Returns:
        List of error messages (empty if valid)

    Raises:
        SchemaError: If raise_on_error=True and validation fails
    """
    errors = []
    ctx = f" ({context})" if context else ""

    if schema.row_count is not None and len(df) != schema.row_count:
        errors.append(f"Expected {schema.row_count} rows, got {len(df)}{ctx}")

    if len(df) < schema.min_rows:
        errors.append(f"Expected at least {schema.min_rows} rows, got {len(df)}{ctx}")

    missing = [c for c in schema.required_columns if c not in df.columns]
    if missing:
        errors.append(f"Missing required columns: {missing}{ctx}")

    for col_spec in schema.columns:
        if col_spec.name in missing:
            continue
        errors.extend(validate_column(df, col_spec, context))

    if errors and raise_on_error:
        raise SchemaError(f"Schema validation failed for '{schema.name}':\n" + "\n".join(errors))

    return errors


# =============================================================================
# Key Handling
# =============================================================================

def canonicalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Return a copy with canonical column names.

    Key headers are matched case-insensitively (HOOD_ID -> hood_id,
    AREA_NAME -> area_name); `<CATEGORY>_<YEAR>` headers are upper-cased.
    Other columns keep their names.
    """
    renames = {}
    for col in df.columns:
        name = str(col).strip()
        lowered = name.lower()
        if lowered in KEY_COLUMNS:
            renames[col] = lowered
        elif lowered.startswith(TOTAL_PREFIX.lower()):
            renames[col] = TOTAL_PREFIX + name[len(TOTAL_PREFIX):].upper()
        elif "_" in name and name.rsplit("_", 1)[1].isdigit():
            renames[col] = name.upper()
        else:
            renames[col] = name

    new_names = list(renames.values())
    dups = sorted({n for n in new_names if new_names.count(n) > 1})
    if dups:
        raise SchemaError(f"Columns collide after canonicalizing names: {dups}")

    return df.rename(columns=renames)


def ensure_hood_id_dtype(df: pd.DataFrame) -> pd.DataFrame:
    """
    Return a copy with hood_id cast to Int64.

    Raises:
        SchemaError: If hood_id is missing or holds non-integer values
    """
    if ID_COLUMN not in df.columns:
        raise SchemaError(f"Missing {ID_COLUMN} column")

    df = df.copy()
    numeric = pd.to_numeric(df[ID_COLUMN], errors="coerce")
    bad = (numeric.isna() & df[ID_COLUMN].notna()) | (numeric.notna() & (numeric % 1 != 0))
    if bad.any():
        examples = list(df.loc[bad, ID_COLUMN].unique()[:5])
        raise SchemaError(f"{ID_COLUMN} has non-integer values: {examples}")

    df[ID_COLUMN] = numeric.astype("Int64")
    return df


def validate_keys(df: pd.DataFrame, context: str = "") -> None:
    """
    Validate hood_id / area_name: present, non-missing, unique.

    Raises:
        SchemaError: If key validation fails
    """
    validate_schema(df, KEYS_SCHEMA, context=context)
