# File: codeforge/generators/backend.py
"""
CodeForge - Backend Generator (NestJS + TypeORM)
================================================
Emits a complete TypeScript backend source tree for a :class:`DataModel`.

Per entity ``Foo`` (files under ``src/foo/``):
    foo.entity.ts           TypeORM entity
    dto/create-foo.dto.ts   class-validator DTO
    dto/update-foo.dto.ts   ``PartialType`` of the create DTO
    foo.service.ts          create / findAll (paginated) / findOne / update / remove
    foo.controller.ts       HTTP routes wired to the service
    foo.module.ts           Nest module aggregating the above
    foo.service.spec.ts     unit test (when ``features.testing``)

Shared scaffolding: ``package.json``, bootstrap, app module, health check,
database config, ``.env.example``, JWT auth (when ``features.authentication``)
and tooling config.

Every generator method builds a list of lines and joins them once, the same
way for all artifacts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set, Tuple

from codeforge.generators.base import BaseGenerator, make_file
from codeforge.generators.openapi import create_fields
from codeforge.models import (
    DataKind,
    DatabaseType,
    DataModel,
    Entity,
    EntityField,
    FileKind,
    GeneratedFile,
    GenerationStrategy,
    ProjectConfig,
    RelationshipType,
)
from codeforge.type_mapper import enum_values, to_column_type, to_language_type
from codeforge.utils import (
    build_import_block,
    dump_json,
    indent_lines,
    pluralize,
    to_camel_case,
    to_kebab_case,
    to_snake_case,
    to_title_human,
    ts_literal,
    ts_string,
)

logger: logging.Logger = logging.getLogger("codeforge.generators.backend")

TS: str = "typescript"

_TYPEORM_DRIVERS: Dict[str, str] = {
    DatabaseType.POSTGRESQL.value: "postgres",
    DatabaseType.MYSQL.value: "mysql",
    DatabaseType.SQLITE.value: "sqlite",
    DatabaseType.MONGODB.value: "mongodb",
}

_DRIVER_PACKAGES: Dict[str, Tuple[str, str]] = {
    DatabaseType.POSTGRESQL.value: ("pg", "^8.11.3"),
    DatabaseType.MYSQL.value: ("mysql2", "^3.6.5"),
    DatabaseType.SQLITE.value: ("sqlite3", "^5.1.6"),
    DatabaseType.MONGODB.value: ("mongodb", "^5.9.2"),
}

# Column types sqlite cannot store natively.
_SQLITE_COLUMN_TYPES: Dict[str, str] = {
    "enum": "simple-enum",
    "json": "simple-json",
    "timestamp": "datetime",
    "uuid": "varchar",
}

_INVERSE_RELATIONSHIP: Dict[str, str] = {
    RelationshipType.MANY_TO_ONE.value: RelationshipType.ONE_TO_MANY.value,
    RelationshipType.ONE_TO_MANY.value: RelationshipType.MANY_TO_ONE.value,
    RelationshipType.ONE_TO_ONE.value: RelationshipType.ONE_TO_ONE.value,
    RelationshipType.MANY_TO_MANY.value: RelationshipType.MANY_TO_MANY.value,
}

_RELATIONSHIP_DECORATORS: Dict[str, str] = {
    RelationshipType.ONE_TO_ONE.value: "OneToOne",
    RelationshipType.ONE_TO_MANY.value: "OneToMany",
    RelationshipType.MANY_TO_ONE.value: "ManyToOne",
    RelationshipType.MANY_TO_MANY.value: "ManyToMany",
}


def _ts_options(pairs: List[Tuple[str, str]]) -> str:
    """``[("type", "'uuid'")]`` -> ``{ type: 'uuid' }``; empty -> ``""``."""
    if not pairs:
        return ""
    return "{ " + ", ".join(f"{key}: {value}" for key, value in pairs) + " }"


def _ts_array(values: List[str]) -> str:
    return "[" + ", ".join(ts_string(v) for v in values) + "]"


@dataclass(frozen=True, slots=True)
class EntityNames:
    """Every identifier derived from one entity name."""

    class_name: str
    variable: str
    file: str
    route: str
    table: str

    @classmethod
    def of(cls, entity: Entity) -> EntityNames:
        return cls(
            class_name=entity.name,
            variable=to_camel_case(entity.name),
            file=to_kebab_case(entity.name),
            route=pluralize(to_kebab_case(entity.name)),
            table=entity.table_name or pluralize(to_snake_case(entity.name)),
        )

    @property
    def directory(self) -> str:
        return f"src/{self.file}"


class BackendGenerator(BaseGenerator):
    """NestJS/TypeORM project generator."""

    target = "Backend"

    def __init__(self, config: ProjectConfig, model: DataModel) -> None:
        super().__init__(config, model)
        self._features = config.features
        self._database: str = str(config.database.type)

    # -----------------------------------------------------------------
    # Aggregate
    # -----------------------------------------------------------------

    def build_files(self) -> List[GeneratedFile]:
        files: List[GeneratedFile] = [
            make_file("package.json", self.generate_package_json(), FileKind.CONFIG, "json"),
            make_file("src/main.ts", self.generate_main(), FileKind.SOURCE, TS),
            make_file("src/app.module.ts", self.generate_app_module(), FileKind.SOURCE, TS),
            make_file("src/app.controller.ts", self.generate_app_controller(), FileKind.SOURCE, TS),
            make_file("src/app.service.ts", self.generate_app_service(), FileKind.SOURCE, TS),
            make_file(
                "src/common/dto/pagination.dto.ts",
                self.generate_pagination_dto(),
                FileKind.SOURCE,
                TS,
            ),
        ]

        for entity in self.model.entities:
            names: EntityNames = EntityNames.of(entity)
            base: str = names.directory
            files.extend([
                make_file(f"{base}/{names.file}.entity.ts", self.generate_entity(entity), FileKind.SOURCE, TS),
                make_file(
                    f"{base}/dto/create-{names.file}.dto.ts",
                    self.generate_create_dto(entity),
                    FileKind.SOURCE,
                    TS,
                ),
                make_file(
                    f"{base}/dto/update-{names.file}.dto.ts",
                    self.generate_update_dto(entity),
                    FileKind.SOURCE,
                    TS,
                ),
                make_file(f"{base}/{names.file}.service.ts", self.generate_service(entity), FileKind.SOURCE, TS),
                make_file(
                    f"{base}/{names.file}.controller.ts",
                    self.generate_controller(entity),
                    FileKind.SOURCE,
                    TS,
                ),
                make_file(f"{base}/{names.file}.module.ts", self.generate_module(entity), FileKind.SOURCE, TS),
            ])
            if self._features.testing:
                files.append(
                    make_file(
                        f"{base}/{names.file}.service.spec.ts",
                        self.generate_service_spec(entity),
                        FileKind.TEST,
                        TS,
                    )
                )

        files.append(
            make_file("src/config/database.config.ts", self.generate_database_config(), FileKind.CONFIG, TS)
        )
        files.append(make_file(".env.example", self.generate_env_example(), FileKind.CONFIG, "dotenv"))

        if self._features.authentication:
            files.extend(self._auth_files())

        files.extend([
            make_file("tsconfig.json", self.generate_tsconfig(), FileKind.CONFIG, "json"),
            make_file("nest-cli.json", self.generate_nest_cli(), FileKind.CONFIG, "json"),
            make_file(".eslintrc.js", self.generate_eslintrc(), FileKind.CONFIG, "javascript"),
            make_file(".prettierrc", dump_json({"singleQuote": True, "trailingComma": "all"}), FileKind.CONFIG, "json"),
        ])

        if self._features.testing:
            files.extend([
                make_file("jest.config.js", self.generate_jest_config(), FileKind.TEST, "javascript"),
                make_file("test/jest-e2e.json", self.generate_jest_e2e(), FileKind.TEST, "json"),
                make_file("test/app.e2e-spec.ts", self.generate_e2e_spec(), FileKind.TEST, TS),
            ])

        return files

    # -----------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------

    def _key_field(self, entity: Entity) -> Tuple[str, str]:
        """Name and TypeScript type of the entity's primary key."""
        key: Optional[EntityField] = entity.primary_key
        if key is None:
            return "id", "string"
        # Route parameters arrive as strings; only numeric keys get converted.
        key_type: str = "number" if key.data_type.type == DataKind.NUMBER else "string"
        return key.name, key_type

    def _column_type(self, entity_field: EntityField) -> str:
        column: str = to_column_type(entity_field.data_type)
        if self._database == DatabaseType.SQLITE.value:
            return _SQLITE_COLUMN_TYPES.get(column, column)
        return column

    def _inverse_side(self, entity: Entity, entity_field: EntityField) -> Optional[str]:
        rel = entity_field.relationship
        target: Optional[Entity] = self.model.get_entity(rel.target)
        if target is None:
            return None
        wanted: str = _INVERSE_RELATIONSHIP[rel.type]
        for candidate in target.relationship_fields:
            if candidate is entity_field:
                continue
            if candidate.relationship.target == entity.name and candidate.relationship.type == wanted:
                return candidate.name
        return None

    @staticmethod
    def _is_optional(entity_field: EntityField) -> bool:
        if entity_field.is_primary_key:
            return False
        if entity_field.relationship is not None and entity_field.relationship.is_to_many:
            return False
        return bool(entity_field.data_type.nullable) or not entity_field.is_required

    # -----------------------------------------------------------------
    # Entity
    # -----------------------------------------------------------------

    def generate_entity(self, entity: Entity) -> str:
        names: EntityNames = EntityNames.of(entity)
        typeorm: Set[str] = {"Entity"}
        swagger: Set[str] = set()
        related: Dict[str, str] = {}
        body: List[str] = []

        for entity_field in entity.fields:
            body.extend(self._entity_member(entity, entity_field, typeorm, swagger, related))
            body.append("")

        if entity.timestamps:
            typeorm.update({"CreateDateColumn", "UpdateDateColumn"})
            body.extend([
                "@CreateDateColumn()",
                "createdAt: Date;",
                "",
                "@UpdateDateColumn()",
                "updatedAt: Date;",
                "",
            ])
        if entity.soft_delete:
            typeorm.add("DeleteDateColumn")
            body.extend(["@DeleteDateColumn({ nullable: true })", "deletedAt?: Date;", ""])

        while body and body[-1] == "":
            body.pop()

        class_decorators: List[str] = [f"@Entity({ts_string(names.table)})"]
        for index in entity.indexes or []:
            typeorm.add("Index")
            options: str = _ts_options([("unique", "true")] if index.unique else [])
            args: List[str] = [ts_string(index.name), _ts_array(index.fields)]
            if options:
                args.append(options)
            class_decorators.append(f"@Index({', '.join(args)})")
        for constraint in entity.constraints or []:
            if constraint.type == "unique":
                typeorm.add("Unique")
                class_decorators.append(
                    f"@Unique({ts_string(constraint.name)}, {_ts_array(constraint.fields)})"
                )
            elif constraint.type == "check" and constraint.expression:
                typeorm.add("Check")
                class_decorators.append(
                    f"@Check({ts_string(constraint.name)}, {ts_string(constraint.expression)})"
                )

        imports: Dict[str, Set[str]] = {"typeorm": typeorm, "@nestjs/swagger": swagger}
        lines: List[str] = build_import_block(imports)
        for class_name, module_path in related.items():
            lines.append(f"import {{ {class_name} }} from {ts_string(module_path)};")
        lines.append("")
        lines.extend(class_decorators)
        lines.append(f"export class {names.class_name} {{")
        lines.extend(indent_lines(body))
        lines.append("}")

        logger.debug("Generated entity for '%s': %d lines.", entity.name, len(lines))
        return "\n".join(lines)

    def _entity_member(
        self,
        entity: Entity,
        entity_field: EntityField,
        typeorm: Set[str],
        swagger: Set[str],
        related: Dict[str, str],
    ) -> List[str]:
        data_type = entity_field.data_type
        rel = entity_field.relationship
        lines: List[str] = []

        api_options: List[Tuple[str, str]] = []
        if data_type.description:
            api_options.append(("description", ts_string(data_type.description)))
        if data_type.type == DataKind.ENUM:
            values: List[str] = enum_values(data_type, self.model)
            if values:
                api_options.append(("enum", _ts_array(values)))
        decorator: str = "ApiPropertyOptional" if self._is_optional(entity_field) else "ApiProperty"
        if rel is None:
            swagger.add(decorator)
            lines.append(f"@{decorator}({_ts_options(api_options)})")

        if entity_field.is_primary_key:
            if entity_field.is_generated:
                typeorm.add("PrimaryGeneratedColumn")
                strategy: str = entity_field.generation_strategy or (
                    "uuid" if to_column_type(data_type) == "uuid" else "increment"
                )
                if strategy != GenerationStrategy.UUID.value:
                    strategy = GenerationStrategy.INCREMENT.value
                lines.append(f"@PrimaryGeneratedColumn({ts_string(strategy)})")
            else:
                typeorm.add("PrimaryColumn")
                lines.append(f"@PrimaryColumn({_ts_options([('type', ts_string(self._column_type(entity_field)))])})")
        elif rel is not None:
            lines.extend(self._relationship_decorators(entity, entity_field, typeorm))
            if rel.target != entity.name:
                target_file: str = to_kebab_case(rel.target)
                related[rel.target] = f"../{target_file}/{target_file}.entity"
        else:
            column_type: str = self._column_type(entity_field)
            options: List[Tuple[str, str]] = [("type", ts_string(column_type))]
            rules = data_type.validation
            if column_type == "varchar" and rules is not None and rules.max_length is not None:
                options.append(("length", str(rules.max_length)))
            if column_type in ("enum", "simple-enum"):
                options.append(("enum", _ts_array(enum_values(data_type, self.model))))
            if entity_field.is_unique:
                options.append(("unique", "true"))
            if data_type.nullable:
                options.append(("nullable", "true"))
            if data_type.default is not None:
                options.append(("default", ts_literal(data_type.default)))
            if entity_field.is_indexed:
                typeorm.add("Index")
                lines.append("@Index()")
            typeorm.add("Column")
            lines.append(f"@Column({_ts_options(options)})")

        ts_type: str = to_language_type(data_type, rel.target if rel else None)
        marker: str = "?" if self._is_optional(entity_field) else ""
        lines.append(f"{entity_field.name}{marker}: {ts_type};")
        return lines

    def _relationship_decorators(
        self,
        entity: Entity,
        entity_field: EntityField,
        typeorm: Set[str],
    ) -> List[str]:
        rel = entity_field.relationship
        decorator: str = _RELATIONSHIP_DECORATORS[rel.type]
        typeorm.add(decorator)

        args: List[str] = [f"() => {rel.target}"]
        inverse: Optional[str] = self._inverse_side(entity, entity_field)
        if inverse is None and rel.type == RelationshipType.ONE_TO_MANY:
            inverse = to_camel_case(entity.name)
            self.warn(
                f"Entity {entity.name}.{entity_field.name}: no inverse manyToOne field on "
                f"{rel.target}, assuming '{inverse}'"
            )
        if inverse is not None:
            args.append(f"({to_camel_case(rel.target)}) => {to_camel_case(rel.target)}.{inverse}")

        options: List[Tuple[str, str]] = []
        if rel.cascade:
            options.append(("cascade", "true"))
        if rel.eager:
            options.append(("eager", "true"))
        if rel.on_delete:
            options.append(("onDelete", ts_string(rel.on_delete)))
        if options:
            args.append(_ts_options(options))

        lines: List[str] = [f"@{decorator}({', '.join(args)})"]
        if rel.type in (RelationshipType.MANY_TO_ONE, RelationshipType.ONE_TO_ONE) and rel.foreign_key:
            typeorm.add("JoinColumn")
            lines.append(f"@JoinColumn({_ts_options([('name', ts_string(rel.foreign_key))])})")
        if rel.type == RelationshipType.MANY_TO_MANY and rel.join_table:
            typeorm.add("JoinTable")
            lines.append(f"@JoinTable({_ts_options([('name', ts_string(rel.join_table))])})")
        return lines

    # -----------------------------------------------------------------
    # DTOs
    # -----------------------------------------------------------------

    def _validators_for(self, entity_field: EntityField) -> List[str]:
        data_type = entity_field.data_type
        rules = data_type.validation
        kind: str = data_type.type
        decorators: List[str] = []

        if not entity_field.is_required or data_type.nullable:
            decorators.append("IsOptional()")

        if kind == DataKind.STRING:
            fmt: Optional[str] = data_type.format
            if fmt == "email" or (rules is not None and rules.email):
                decorators.append("IsEmail()")
            elif fmt == "url" or (rules is not None and rules.url):
                decorators.append("IsUrl()")
            elif fmt == "uuid" or (rules is not None and rules.uuid):
                decorators.append("IsUUID()")
            else:
                decorators.append("IsString()")
            if rules is not None:
                if rules.min_length is not None:
                    decorators.append(f"MinLength({rules.min_length})")
                if rules.max_length is not None:
                    decorators.append(f"MaxLength({rules.max_length})")
                if rules.pattern:
                    decorators.append(f"Matches(new RegExp({ts_string(rules.pattern)}))")
        elif kind == DataKind.NUMBER:
            decorators.append("IsInt()" if data_type.format in ("int32", "int64") else "IsNumber()")
            if rules is not None:
                if rules.min is not None:
                    decorators.append(f"Min({rules.min:g})")
                if rules.max is not None:
                    decorators.append(f"Max({rules.max:g})")
        elif kind == DataKind.BOOLEAN:
            decorators.append("IsBoolean()")
        elif kind == DataKind.DATE:
            decorators.append("IsDateString()")
        elif kind == DataKind.ARRAY:
            decorators.append("IsArray()")
        elif kind == DataKind.OBJECT:
            decorators.append("IsObject()")
        elif kind == DataKind.ENUM:
            decorators.append(f"IsIn({_ts_array(enum_values(data_type, self.model))})")
        else:
            raise ValueError(f"Unsupported data type: {kind!r}")
        return decorators

    def generate_create_dto(self, entity: Entity) -> str:
        names: EntityNames = EntityNames.of(entity)
        validators: Set[str] = set()
        swagger: Set[str] = set()
        body: List[str] = []

        for entity_field in create_fields(entity):
            data_type = entity_field.data_type
            optional: bool = not entity_field.is_required or bool(data_type.nullable)
            api_decorator: str = "ApiPropertyOptional" if optional else "ApiProperty"
            swagger.add(api_decorator)

            api_options: List[Tuple[str, str]] = []
            if data_type.description:
                api_options.append(("description", ts_string(data_type.description)))
            if data_type.default is not None:
                api_options.append(("default", ts_literal(data_type.default)))
            if data_type.type == DataKind.ENUM:
                api_options.append(("enum", _ts_array(enum_values(data_type, self.model))))

            body.append(f"@{api_decorator}({_ts_options(api_options)})")
            for decorator in self._validators_for(entity_field):
                validators.add(decorator.split("(", 1)[0])
                body.append(f"@{decorator}")
            marker: str = "?" if optional else ""
            body.append(f"{entity_field.name}{marker}: {to_language_type(data_type)};")
            body.append("")

        while body and body[-1] == "":
            body.pop()

        lines: List[str] = build_import_block({
            "@nestjs/swagger": swagger,
            "class-validator": validators,
        })
        if lines:
            lines.append("")
        lines.append(f"export class Create{names.class_name}Dto {{")
        lines.extend(indent_lines(body))
        lines.append("}")
        return "\n".join(lines)

    def generate_update_dto(self, entity: Entity) -> str:
        names: EntityNames = EntityNames.of(entity)
        return "\n".join([
            "import { PartialType } from '@nestjs/swagger';",
            f"import {{ Create{names.class_name}Dto }} from './create-{names.file}.dto';",
            "",
            f"export class Update{names.class_name}Dto extends PartialType(Create{names.class_name}Dto) {{}}",
        ])

    def generate_pagination_dto(self) -> str:
        return "\n".join([
            "import { ApiPropertyOptional } from '@nestjs/swagger';",
            "import { Type } from 'class-transformer';",
            "import { IsInt, IsOptional, IsString, Max, Min } from 'class-validator';",
            "",
            "export class PaginationQueryDto {",
            "  @ApiPropertyOptional({ default: 1 })",
            "  @IsOptional()",
            "  @Type(() => Number)",
            "  @IsInt()",
            "  @Min(1)",
            "  page?: number = 1;",
            "",
            "  @ApiPropertyOptional({ default: 10 })",
            "  @IsOptional()",
            "  @Type(() => Number)",
            "  @IsInt()",
            "  @Min(1)",
            "  @Max(100)",
            "  limit?: number = 10;",
            "",
            "  @ApiPropertyOptional({ description: \"Field to sort by, prefix with '-' for descending\" })",
            "  @IsOptional()",
            "  @IsString()",
            "  sort?: string;",
            "}",
            "",
            "export interface PaginationMeta {",
            "  page: number;",
            "  limit: number;",
            "  total: number;",
            "  totalPages: number;",
            "}",
            "",
            "export interface PaginatedResult<T> {",
            "  data: T[];",
            "  meta: PaginationMeta;",
            "}",
        ])

    # -----------------------------------------------------------------
    # Service / controller / module
    # -----------------------------------------------------------------

    def generate_service(self, entity: Entity) -> str:
        n: EntityNames = EntityNames.of(entity)
        key_name, key_type = self._key_field(entity)
        repository: str = f"{n.variable}Repository"
        default_order: str = "createdAt" if entity.timestamps else key_name
        remove_call: str = "softRemove" if entity.soft_delete else "remove"

        lines: List[str] = [
            "import { Injectable, NotFoundException } from '@nestjs/common';",
            "import { InjectRepository } from '@nestjs/typeorm';",
            "import { FindOptionsOrder, Repository } from 'typeorm';",
            "import { PaginatedResult, PaginationQueryDto } from '../common/dto/pagination.dto';",
            f"import {{ Create{n.class_name}Dto }} from './dto/create-{n.file}.dto';",
            f"import {{ Update{n.class_name}Dto }} from './dto/update-{n.file}.dto';",
            f"import {{ {n.class_name} }} from './{n.file}.entity';",
            "",
            "@Injectable()",
            f"export class {n.class_name}Service {{",
            "  constructor(",
            f"    @InjectRepository({n.class_name})",
            f"    private readonly {repository}: Repository<{n.class_name}>,",
            "  ) {}",
            "",
            f"  async create(dto: Create{n.class_name}Dto): Promise<{n.class_name}> {{",
            f"    const {n.variable} = this.{repository}.create(dto as Partial<{n.class_name}>);",
            f"    return this.{repository}.save({n.variable});",
            "  }",
            "",
            f"  async findAll(query: PaginationQueryDto): Promise<PaginatedResult<{n.class_name}>> {{",
            "    const page = query.page ?? 1;",
            "    const limit = query.limit ?? 10;",
            "    const order = (query.sort",
            "      ? { [query.sort.replace(/^-/, '')]: query.sort.startsWith('-') ? 'DESC' : 'ASC' }",
            f"      : {{ {default_order}: 'DESC' }}) as FindOptionsOrder<{n.class_name}>;",
            f"    const [data, total] = await this.{repository}.findAndCount({{",
            "      skip: (page - 1) * limit,",
            "      take: limit,",
            "      order,",
            "    });",
            "    return {",
            "      data,",
            "      meta: { page, limit, total, totalPages: Math.ceil(total / limit) },",
            "    };",
            "  }",
            "",
            f"  async findOne({key_name}: {key_type}): Promise<{n.class_name}> {{",
            f"    const {n.variable} = await this.{repository}.findOne({{ where: {{ {key_name} }} }});",
            f"    if (!{n.variable}) {{",
            f"      throw new NotFoundException(`{n.class_name} with {key_name} ${{{key_name}}} not found`);",
            "    }",
            f"    return {n.variable};",
            "  }",
            "",
            f"  async update({key_name}: {key_type}, dto: Update{n.class_name}Dto): Promise<{n.class_name}> {{",
            f"    const {n.variable} = await this.findOne({key_name});",
            f"    Object.assign({n.variable}, dto);",
            f"    return this.{repository}.save({n.variable});",
            "  }",
            "",
            f"  async remove({key_name}: {key_type}): Promise<void> {{",
            f"    const {n.variable} = await this.findOne({key_name});",
            f"    await this.{repository}.{remove_call}({n.variable});",
            "  }",
            "}",
        ]
        logger.debug("Generated service for '%s': %d lines.", entity.name, len(lines))
        return "\n".join(lines)

    def generate_controller(self, entity: Entity) -> str:
        n: EntityNames = EntityNames.of(entity)
        key_name, key_type = self._key_field(entity)
        service: str = f"{n.variable}Service"
        human: str = to_title_human(entity.name).lower()

        common: Set[str] = {
            "Body", "Controller", "Delete", "Get", "HttpCode", "HttpStatus",
            "Param", "Post as HttpPost", "Put", "Query",
        }
        param: str = f"@Param('{key_name}') {key_name}: {key_type}"
        if key_type == "number":
            common.add("ParseIntPipe")
            param = f"@Param('{key_name}', ParseIntPipe) {key_name}: number"

        swagger: Set[str] = {"ApiOperation", "ApiResponse", "ApiTags"}
        class_decorators: List[str] = [f"@ApiTags({ts_string(entity.name)})"]
        imports: Dict[str, Set[str]] = {"@nestjs/common": common, "@nestjs/swagger": swagger}
        if self._features.authentication:
            common.add("UseGuards")
            swagger.add("ApiBearerAuth")
            imports["@nestjs/passport"] = {"AuthGuard"}
            class_decorators.extend(["@ApiBearerAuth()", "@UseGuards(AuthGuard('jwt'))"])
        class_decorators.append(f"@Controller({ts_string(n.route)})")

        path_param: str = f":{key_name}"

        lines: List[str] = build_import_block(imports)
        lines.extend([
            "import { PaginatedResult, PaginationQueryDto } from '../common/dto/pagination.dto';",
            f"import {{ Create{n.class_name}Dto }} from './dto/create-{n.file}.dto';",
            f"import {{ Update{n.class_name}Dto }} from './dto/update-{n.file}.dto';",
            f"import {{ {n.class_name} }} from './{n.file}.entity';",
            f"import {{ {n.class_name}Service }} from './{n.file}.service';",
            "",
        ])
        lines.extend(class_decorators)
        lines.extend([
            f"export class {n.class_name}Controller {{",
            f"  constructor(private readonly {service}: {n.class_name}Service) {{}}",
            "",
            "  @HttpPost()",
            f"  @ApiOperation({{ summary: 'Create a {human}' }})",
            f"  @ApiResponse({{ status: 201, type: {n.class_name} }})",
            f"  create(@Body() dto: Create{n.class_name}Dto): Promise<{n.class_name}> {{",
            f"    return this.{service}.create(dto);",
            "  }",
            "",
            "  @Get()",
            f"  @ApiOperation({{ summary: 'List {pluralize(human)}' }})",
            f"  findAll(@Query() query: PaginationQueryDto): Promise<PaginatedResult<{n.class_name}>> {{",
            f"    return this.{service}.findAll(query);",
            "  }",
            "",
            f"  @Get('{path_param}')",
            f"  @ApiOperation({{ summary: 'Get a {human} by {path_param[1:]}' }})",
            f"  @ApiResponse({{ status: 404, description: '{entity.name} not found' }})",
            f"  findOne({param}): Promise<{n.class_name}> {{",
            f"    return this.{service}.findOne({key_name});",
            "  }",
            "",
            f"  @Put('{path_param}')",
            f"  @ApiOperation({{ summary: 'Update a {human}' }})",
            "  update(",
            f"    {param},",
            f"    @Body() dto: Update{n.class_name}Dto,",
            f"  ): Promise<{n.class_name}> {{",
            f"    return this.{service}.update({key_name}, dto);",
            "  }",
            "",
            f"  @Delete('{path_param}')",
            "  @HttpCode(HttpStatus.NO_CONTENT)",
            f"  @ApiOperation({{ summary: 'Delete a {human}' }})",
            f"  remove({param}): Promise<void> {{",
            f"    return this.{service}.remove({key_name});",
            "  }",
            "}",
        ])
        logger.debug("Generated controller for '%s': %d lines.", entity.name, len(lines))
        return "\n".join(lines)

    def generate_module(self, entity: Entity) -> str:
        n: EntityNames = EntityNames.of(entity)
        return "\n".join([
            "import { Module } from '@nestjs/common';",
            "import { TypeOrmModule } from '@nestjs/typeorm';",
            f"import {{ {n.class_name}Controller }} from './{n.file}.controller';",
            f"import {{ {n.class_name} }} from './{n.file}.entity';",
            f"import {{ {n.class_name}Service }} from './{n.file}.service';",
            "",
            "@Module({",
            f"  imports: [TypeOrmModule.forFeature([{n.class_name}])],",
            f"  controllers: [{n.class_name}Controller],",
            f"  providers: [{n.class_name}Service],",
            f"  exports: [{n.class_name}Service],",
            "})",
            f"export class {n.class_name}Module {{}}",
        ])

    def generate_service_spec(self, entity: Entity) -> str:
        n: EntityNames = EntityNames.of(entity)
        key_name, key_type = self._key_field(entity)
        sample_key: str = "1" if key_type == "number" else "'missing'"
        return "\n".join([
            "import { NotFoundException } from '@nestjs/common';",
            "import { Test, TestingModule } from '@nestjs/testing';",
            "import { getRepositoryToken } from '@nestjs/typeorm';",
            f"import {{ {n.class_name} }} from './{n.file}.entity';",
            f"import {{ {n.class_name}Service }} from './{n.file}.service';",
            "",
            f"describe('{n.class_name}Service', () => {{",
            f"  let service: {n.class_name}Service;",
            "  const repository = {",
            "    create: jest.fn((dto) => dto),",
            "    save: jest.fn(async (entity) => entity),",
            "    findAndCount: jest.fn(async () => [[], 0]),",
            "    findOne: jest.fn(async () => null),",
            "    remove: jest.fn(),",
            "    softRemove: jest.fn(),",
            "  };",
            "",
            "  beforeEach(async () => {",
            "    const module: TestingModule = await Test.createTestingModule({",
            "      providers: [",
            f"        {n.class_name}Service,",
            f"        {{ provide: getRepositoryToken({n.class_name}), useValue: repository }},",
            "      ],",
            "    }).compile();",
            "",
            f"    service = module.get<{n.class_name}Service>({n.class_name}Service);",
            "  });",
            "",
            "  it('returns an empty page when there are no records', async () => {",
            "    const result = await service.findAll({ page: 1, limit: 10 });",
            "    expect(result.meta.total).toBe(0);",
            "    expect(result.data).toEqual([]);",
            "  });",
            "",
            f"  it('throws NotFoundException for an unknown {key_name}', async () => {{",
            f"    await expect(service.findOne({sample_key} as any)).rejects.toBeInstanceOf(NotFoundException);",
            "  });",
            "});",
        ])

    # -----------------------------------------------------------------
    # Application scaffolding
    # -----------------------------------------------------------------

    def generate_package_json(self) -> str:
        project = self.config.project
        driver, driver_version = _DRIVER_PACKAGES[self._database]
        dependencies: Dict[str, str] = {
            "@nestjs/common": "^10.2.10",
            "@nestjs/config": "^3.1.1",
            "@nestjs/core": "^10.2.10",
            "@nestjs/platform-express": "^10.2.10",
            "@nestjs/swagger": "^7.1.16",
            "@nestjs/typeorm": "^10.0.1",
            "class-transformer": "^0.5.1",
            "class-validator": "^0.14.0",
            "reflect-metadata": "^0.1.13",
            "rxjs": "^7.8.1",
            "typeorm": "^0.3.17",
            driver: driver_version,
        }
        dev_dependencies: Dict[str, str] = {
            "@nestjs/cli": "^10.2.1",
            "@nestjs/schematics": "^10.0.3",
            "@nestjs/testing": "^10.2.10",
            "@types/express": "^4.17.21",
            "@types/jest": "^29.5.10",
            "@types/node": "^20.10.0",
            "@types/supertest": "^2.0.16",
            "@typescript-eslint/eslint-plugin": "^6.13.1",
            "@typescript-eslint/parser": "^6.13.1",
            "eslint": "^8.54.0",
            "jest": "^29.7.0",
            "prettier": "^3.1.0",
            "supertest": "^6.3.3",
            "ts-jest": "^29.1.1",
            "ts-node": "^10.9.1",
            "typescript": "^5.3.2",
        }
        if self._features.authentication:
            dependencies.update({
                "@nestjs/jwt": "^10.2.0",
                "@nestjs/passport": "^10.0.2",
                "bcrypt": "^5.1.1",
                "passport": "^0.7.0",
                "passport-jwt": "^4.0.1",
            })
            dev_dependencies.update({
                "@types/bcrypt": "^5.0.2",
                "@types/passport-jwt": "^3.0.13",
            })

        package: Dict[str, Any] = {
            "name": to_kebab_case(project.name),
            "version": project.version,
            "description": project.description or f"{project.name} API",
            "author": project.author or "",
            "private": True,
            "license": "UNLICENSED",
            "scripts": {
                "build": "nest build",
                "format": "prettier --write \"src/**/*.ts\" \"test/**/*.ts\"",
                "start": "nest start",
                "start:dev": "nest start --watch",
                "start:prod": "node dist/main",
                "lint": "eslint \"{src,test}/**/*.ts\" --fix",
                "test": "jest",
                "test:cov": "jest --coverage",
                "test:e2e": "jest --config ./test/jest-e2e.json",
            },
            "dependencies": dict(sorted(dependencies.items())),
            "devDependencies": dict(sorted(dev_dependencies.items())),
        }
        return dump_json(package)

    def generate_main(self) -> str:
        title: str = self.config.project.name
        lines: List[str] = [
            "import { ValidationPipe } from '@nestjs/common';",
            "import { NestFactory } from '@nestjs/core';",
        ]
        if self._features.swagger:
            lines.append("import { DocumentBuilder, SwaggerModule } from '@nestjs/swagger';")
        lines.extend([
            "import { AppModule } from './app.module';",
            "",
            "async function bootstrap(): Promise<void> {",
            "  const app = await NestFactory.create(AppModule);",
            "  app.setGlobalPrefix('api/v1');",
            "  app.enableCors();",
            "  app.useGlobalPipes(new ValidationPipe({ whitelist: true, transform: true }));",
        ])
        if self._features.swagger:
            lines.extend([
                "",
                "  const config = new DocumentBuilder()",
                f"    .setTitle({ts_string(title)})",
                f"    .setVersion({ts_string(self.config.project.version)})",
            ])
            if self.config.project.description:
                lines.append(f"    .setDescription({ts_string(self.config.project.description)})")
            if self._features.authentication:
                lines.append("    .addBearerAuth()")
            lines.extend([
                "    .build();",
                "  SwaggerModule.setup('api/docs', app, SwaggerModule.createDocument(app, config));",
            ])
        lines.extend([
            "",
            "  await app.listen(process.env.PORT ?? 3000);",
            "}",
            "",
            "bootstrap();",
        ])
        return "\n".join(lines)

    def generate_app_module(self) -> str:
        lines: List[str] = [
            "import { Module } from '@nestjs/common';",
            "import { ConfigModule } from '@nestjs/config';",
            "import { TypeOrmModule } from '@nestjs/typeorm';",
            "import { AppController } from './app.controller';",
            "import { AppService } from './app.service';",
            "import { databaseConfig } from './config/database.config';",
        ]
        modules: List[str] = []
        for entity in self.model.entities:
            n: EntityNames = EntityNames.of(entity)
            lines.append(f"import {{ {n.class_name}Module }} from './{n.file}/{n.file}.module';")
            modules.append(f"{n.class_name}Module")
        if self._features.authentication:
            lines.append("import { AuthModule } from './auth/auth.module';")
            modules.append("AuthModule")

        lines.extend([
            "",
            "@Module({",
            "  imports: [",
            "    ConfigModule.forRoot({ isGlobal: true }),",
            "    TypeOrmModule.forRootAsync({ useFactory: databaseConfig }),",
        ])
        lines.extend(f"    {module}," for module in modules)
        lines.extend([
            "  ],",
            "  controllers: [AppController],",
            "  providers: [AppService],",
            "})",
            "export class AppModule {}",
        ])
        return "\n".join(lines)

    def generate_app_controller(self) -> str:
        return "\n".join([
            "import { Controller, Get } from '@nestjs/common';",
            "import { AppService } from './app.service';",
            "",
            "@Controller()",
            "export class AppController {",
            "  constructor(private readonly appService: AppService) {}",
            "",
            "  @Get('health')",
            "  health(): { status: string; timestamp: string } {",
            "    return this.appService.getHealth();",
            "  }",
            "}",
        ])

    def generate_app_service(self) -> str:
        return "\n".join([
            "import { Injectable } from '@nestjs/common';",
            "",
            "@Injectable()",
            "export class AppService {",
            "  getHealth(): { status: string; timestamp: string } {",
            "    return { status: 'ok', timestamp: new Date().toISOString() };",
            "  }",
            "}",
        ])

    def generate_database_config(self) -> str:
        database = self.config.database
        driver: str = _TYPEORM_DRIVERS[self._database]
        lines: List[str] = [
            "import { TypeOrmModuleOptions } from '@nestjs/typeorm';",
            "",
            "export const databaseConfig = (): TypeOrmModuleOptions => ({",
            f"  type: {ts_string(driver)},",
        ]
        if self._database == DatabaseType.SQLITE.value:
            lines.append(f"  database: process.env.DB_NAME ?? {ts_string(database.database + '.sqlite')},")
        elif self._database == DatabaseType.MONGODB.value:
            default_url: str = f"mongodb://{database.host}:{database.effective_port}/{database.database}"
            lines.append(f"  url: process.env.DATABASE_URL ?? {ts_string(default_url)},")
        else:
            lines.extend([
                f"  host: process.env.DB_HOST ?? {ts_string(database.host)},",
                f"  port: parseInt(process.env.DB_PORT ?? '{database.effective_port}', 10),",
                "  username: process.env.DB_USERNAME,",
                "  password: process.env.DB_PASSWORD,",
                f"  database: process.env.DB_NAME ?? {ts_string(database.database)},",
            ])
            if database.db_schema and self._database == DatabaseType.POSTGRESQL.value:
                lines.append(f"  schema: {ts_string(database.db_schema)},")
        lines.extend([
            "  autoLoadEntities: true,",
            "  synchronize: process.env.NODE_ENV !== 'production',",
            "});",
        ])
        return "\n".join(lines)

    def generate_env_example(self) -> str:
        database = self.config.database
        lines: List[str] = ["NODE_ENV=development", "PORT=3000", ""]
        if self._database == DatabaseType.SQLITE.value:
            lines.append(f"DB_NAME={database.database}.sqlite")
        elif self._database == DatabaseType.MONGODB.value:
            lines.append(
                f"DATABASE_URL=mongodb://{database.host}:{database.effective_port}/{database.database}"
            )
        else:
            lines.extend([
                f"DB_HOST={database.host}",
                f"DB_PORT={database.effective_port}",
                f"DB_USERNAME={database.username or 'app'}",
                "DB_PASSWORD=change-me",
                f"DB_NAME={database.database}",
            ])
        if self._features.authentication:
            lines.extend(["", "JWT_SECRET=change-me", "JWT_EXPIRES_IN=1h"])
        return "\n".join(lines)

    # -----------------------------------------------------------------
    # Authentication
    # -----------------------------------------------------------------

    def _auth_files(self) -> List[GeneratedFile]:
        return [
            make_file("src/auth/auth.module.ts", self.generate_auth_module(), FileKind.SOURCE, TS),
            make_file("src/auth/auth.service.ts", self.generate_auth_service(), FileKind.SOURCE, TS),
            make_file("src/auth/auth.controller.ts", self.generate_auth_controller(), FileKind.SOURCE, TS),
            make_file("src/auth/strategies/jwt.strategy.ts", self.generate_jwt_strategy(), FileKind.SOURCE, TS),
            make_file("src/auth/dto/login.dto.ts", self.generate_login_dto(), FileKind.SOURCE, TS),
            make_file("src/auth/dto/register.dto.ts", self.generate_register_dto(), FileKind.SOURCE, TS),
        ]

    def generate_auth_module(self) -> str:
        return "\n".join([
            "import { Module } from '@nestjs/common';",
            "import { JwtModule } from '@nestjs/jwt';",
            "import { PassportModule } from '@nestjs/passport';",
            "import { AuthController } from './auth.controller';",
            "import { AuthService } from './auth.service';",
            "import { JwtStrategy } from './strategies/jwt.strategy';",
            "",
            "@Module({",
            "  imports: [",
            "    PassportModule,",
            "    JwtModule.register({",
            "      secret: process.env.JWT_SECRET ?? 'change-me',",
            "      signOptions: { expiresIn: process.env.JWT_EXPIRES_IN ?? '1h' },",
            "    }),",
            "  ],",
            "  controllers: [AuthController],",
            "  providers: [AuthService, JwtStrategy],",
            "  exports: [AuthService],",
            "})",
            "export class AuthModule {}",
        ])

    def generate_auth_service(self) -> str:
        return "\n".join([
            "import { ConflictException, Injectable, UnauthorizedException } from '@nestjs/common';",
            "import { JwtService } from '@nestjs/jwt';",
            "import * as bcrypt from 'bcrypt';",
            "import { LoginDto } from './dto/login.dto';",
            "import { RegisterDto } from './dto/register.dto';",
            "",
            "interface Credential {",
            "  id: number;",
            "  email: string;",
            "  passwordHash: string;",
            "}",
            "",
            "@Injectable()",
            "export class AuthService {",
            "  // Credentials live in memory; back this with a repository for production use.",
            "  private readonly credentials = new Map<string, Credential>();",
            "",
            "  constructor(private readonly jwtService: JwtService) {}",
            "",
            "  async register(dto: RegisterDto): Promise<{ accessToken: string }> {",
            "    if (this.credentials.has(dto.email)) {",
            "      throw new ConflictException('Email already registered');",
            "    }",
            "    const credential: Credential = {",
            "      id: this.credentials.size + 1,",
            "      email: dto.email,",
            "      passwordHash: await bcrypt.hash(dto.password, 10),",
            "    };",
            "    this.credentials.set(dto.email, credential);",
            "    return this.sign(credential);",
            "  }",
            "",
            "  async login(dto: LoginDto): Promise<{ accessToken: string }> {",
            "    const credential = this.credentials.get(dto.email);",
            "    if (!credential || !(await bcrypt.compare(dto.password, credential.passwordHash))) {",
            "      throw new UnauthorizedException('Invalid credentials');",
            "    }",
            "    return this.sign(credential);",
            "  }",
            "",
            "  private sign(credential: Credential): { accessToken: string } {",
            "    return {",
            "      accessToken: this.jwtService.sign({ sub: credential.id, email: credential.email }),",
            "    };",
            "  }",
            "}",
        ])

    def generate_auth_controller(self) -> str:
        return "\n".join([
            "import { Body, Controller, HttpCode, HttpStatus, Post } from '@nestjs/common';",
            "import { ApiOperation, ApiTags } from '@nestjs/swagger';",
            "import { AuthService } from './auth.service';",
            "import { LoginDto } from './dto/login.dto';",
            "import { RegisterDto } from './dto/register.dto';",
            "",
            "@ApiTags('Auth')",
            "@Controller('auth')",
            "export class AuthController {",
            "  constructor(private readonly authService: AuthService) {}",
            "",
            "  @Post('register')",
            "  @ApiOperation({ summary: 'Register a new account' })",
            "  register(@Body() dto: RegisterDto): Promise<{ accessToken: string }> {",
            "    return this.authService.register(dto);",
            "  }",
            "",
            "  @Post('login')",
            "  @HttpCode(HttpStatus.OK)",
            "  @ApiOperation({ summary: 'Exchange credentials for an access token' })",
            "  login(@Body() dto: LoginDto): Promise<{ accessToken: string }> {",
            "    return this.authService.login(dto);",
            "  }",
            "}",
        ])

    def generate_jwt_strategy(self) -> str:
        return "\n".join([
            "import { Injectable } from '@nestjs/common';",
            "import { PassportStrategy } from '@nestjs/passport';",
            "import { ExtractJwt, Strategy } from 'passport-jwt';",
            "",
            "@Injectable()",
            "export class JwtStrategy extends PassportStrategy(Strategy) {",
            "  constructor() {",
            "    super({",
            "      jwtFromRequest: ExtractJwt.fromAuthHeaderAsBearerToken(),",
            "      ignoreExpiration: false,",
            "      secretOrKey: process.env.JWT_SECRET ?? 'change-me',",
            "    });",
            "  }",
            "",
            "  validate(payload: { sub: number; email: string }): { userId: number; email: string } {",
            "    return { userId: payload.sub, email: payload.email };",
            "  }",
            "}",
        ])

    def generate_login_dto(self) -> str:
        return "\n".join([
            "import { ApiProperty } from '@nestjs/swagger';",
            "import { IsEmail, IsString, MinLength } from 'class-validator';",
            "",
            "export class LoginDto {",
            "  @ApiProperty()",
            "  @IsEmail()",
            "  email: string;",
            "",
            "  @ApiProperty()",
            "  @IsString()",
            "  @MinLength(8)",
            "  password: string;",
            "}",
        ])

    def generate_register_dto(self) -> str:
        return "\n".join([
            "import { ApiPropertyOptional } from '@nestjs/swagger';",
            "import { IsOptional, IsString } from 'class-validator';",
            "import { LoginDto } from './login.dto';",
            "",
            "export class RegisterDto extends LoginDto {",
            "  @ApiPropertyOptional()",
            "  @IsOptional()",
            "  @IsString()",
            "  name?: string;",
            "}",
        ])

    # -----------------------------------------------------------------
    # Tooling config
    # -----------------------------------------------------------------

    @staticmethod
    def generate_tsconfig() -> str:
        return dump_json({
            "compilerOptions": {
                "module": "commonjs",
                "declaration": True,
                "removeComments": True,
                "emitDecoratorMetadata": True,
                "experimentalDecorators": True,
                "allowSyntheticDefaultImports": True,
                "target": "ES2021",
                "sourceMap": True,
                "outDir": "./dist",
                "baseUrl": "./",
                "incremental": True,
                "skipLibCheck": True,
                "strictNullChecks": False,
                "strictPropertyInitialization": False,
                "noImplicitAny": False,
            }
        })

    @staticmethod
    def generate_nest_cli() -> str:
        return dump_json({
            "$schema": "https://json.schemastore.org/nest-cli",
            "collection": "@nestjs/schematics",
            "sourceRoot": "src",
        })

    @staticmethod
    def generate_eslintrc() -> str:
        return "\n".join([
            "module.exports = {",
            "  parser: '@typescript-eslint/parser',",
            "  parserOptions: { project: 'tsconfig.json', sourceType: 'module' },",
            "  plugins: ['@typescript-eslint/eslint-plugin'],",
            "  extends: ['plugin:@typescript-eslint/recommended'],",
            "  root: true,",
            "  env: { node: true, jest: true },",
            "  ignorePatterns: ['.eslintrc.js'],",
            "  rules: {",
            "    '@typescript-eslint/no-explicit-any': 'off',",
            "  },",
            "};",
        ])

    @staticmethod
    def generate_jest_config() -> str:
        return "\n".join([
            "module.exports = {",
            "  moduleFileExtensions: ['js', 'json', 'ts'],",
            "  rootDir: 'src',",
            "  testRegex: '.*\\\\.spec\\\\.ts$',",
            "  transform: { '^.+\\\\.(t|j)s$': 'ts-jest' },",
            "  collectCoverageFrom: ['**/*.(t|j)s'],",
            "  coverageDirectory: '../coverage',",
            "  testEnvironment: 'node',",
            "};",
        ])

    @staticmethod
    def generate_jest_e2e() -> str:
        return dump_json({
            "moduleFileExtensions": ["js", "json", "ts"],
            "rootDir": ".",
            "testEnvironment": "node",
            "testRegex": ".e2e-spec.ts$",
            "transform": {"^.+\\.(t|j)s$": "ts-jest"},
        })

    @staticmethod
    def generate_e2e_spec() -> str:
        return "\n".join([
            "import { INestApplication } from '@nestjs/common';",
            "import { Test } from '@nestjs/testing';",
            "import * as request from 'supertest';",
            "import { AppController } from '../src/app.controller';",
            "import { AppService } from '../src/app.service';",
            "",
            "describe('Health (e2e)', () => {",
            "  let app: INestApplication;",
            "",
            "  beforeAll(async () => {",
            "    const moduleRef = await Test.createTestingModule({",
            "      controllers: [AppController],",
            "      providers: [AppService],",
            "    }).compile();",
            "    app = moduleRef.createNestApplication();",
            "    await app.init();",
            "  });",
            "",
            "  afterAll(async () => {",
            "    await app.close();",
            "  });",
            "",
            "  it('GET /health', () => {",
            "    return request(app.getHttpServer()).get('/health').expect(200);",
            "  });",
            "});",
        ])


__all__: List[str] = ["BackendGenerator", "EntityNames"]

logger.debug("codeforge.generators.backend loaded — %d public symbols.", len(__all__))
