"""Shared fixtures: temporary Go source trees."""

from __future__ import annotations

from pathlib import Path

import pytest

from gophon.fs import LocalFileSystem

BASE_MODULE = "github.com/example/testproject"

SUBJECTS_GO = '''\
// Package testharness provides simple test subjects for the indexing system.
package testharness

import (
	"context"
	"fmt"
	"time"
)

const (
	DefaultTimeout = 30 * time.Second
)
const MaxRetries = 3

// Global variables for testing variable extraction
var (
	GlobalCounter int64
	//internal variable for testing
	isDebugMode bool = false
)

type StringA string
type StringB = string

// User represents a simple user entity.
type User struct {
	ID    int64  `json:"id" db:"user_id"`
	Name  string `json:"name" db:"full_name"`
	Email string `json:"email" db:"email"`
}

// UserService defines operations for user management.
type UserService interface {
	Create(ctx context.Context, user *User) error
	GetByID(ctx context.Context, id int64) (*User, error)
	Update(ctx context.Context, user *User) error
}

// Service implements user business logic.
type Service struct {
	userService UserService
}

// NewService creates a new Service instance.
func NewService(userService UserService) *Service {
	return &Service{
		userService: userService,
	}
}

// ValidateEmail validates an email address format.
func ValidateEmail(email string) bool {
	return len(email) > 0 && contains(email, "@")
}

// CreateUser creates a new user.
func (s *Service) CreateUser(ctx context.Context, name, email string) (*User, error) {
	if !ValidateEmail(email) {
		return nil, fmt.Errorf("invalid email: %s", email)
	}

	user := &User{
		Name:  name,
		Email: email,
	}

	return user, s.userService.Create(ctx, user)
}

// GetUser retrieves a user by ID.
func (s *Service) GetUser(ctx context.Context, id int64) (*User, error) {
	return s.userService.GetByID(ctx, id)
}

// contains is a helper function for string operations.
func contains(s, substr string) bool {
	for i := 0; i <= len(s)-len(substr); i++ {
		if s[i:i+len(substr)] == substr {
			return true
		}
	}
	return false
}
'''


def populate(base: Path, structure: dict) -> None:
    """Create files from *structure*: str values are file contents, dicts are directories."""
    for name, content in structure.items():
        path = base / name
        if isinstance(content, dict):
            path.mkdir(parents=True, exist_ok=True)
            populate(path, content)
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content.encode("utf-8"))


@pytest.fixture
def make_tree(tmp_path: Path):
    """Return a factory building a Go source tree under ``tmp_path / "src"``."""

    def _make(structure: dict) -> Path:
        root = tmp_path / "src"
        root.mkdir(exist_ok=True)
        populate(root, structure)
        return root

    return _make


@pytest.fixture
def fs() -> LocalFileSystem:
    return LocalFileSystem()


@pytest.fixture
def subjects_go() -> str:
    return SUBJECTS_GO
