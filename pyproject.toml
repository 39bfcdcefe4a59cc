[build-system]
requires = ["hatchling>=1.18"]
build-backend = "hatchling.build"

[project]
name = "gorder"
version = "0.1.0"
description = "Order, stock and payment building blocks for a small order-processing system, with Consul discovery and RabbitMQ events"
requires-python = ">=3.10"
keywords = ["orders", "microservices", "grpc", "rabbitmq", "consul", "cqrs"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business",
    "Topic :: System :: Distributed Computing",
]
dependencies = [
    "pika>=1.3",
    "pyyaml>=6.0",
    "requests>=2.28",
    "grpcio>=1.50",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[project.scripts]
gorder-stock = "gorder.stock.server:main"

[tool.hatch.build.targets.wheel]
packages = ["gorder"]

[tool.hatch.build.targets.sdist]
include = ["gorder", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
