"""
Test Documentation Consistency - deeplock

Tests to verify README matches the enums and modules it documents.
"""

from pathlib import Path


DEEPLOCK_PATH = Path(__file__).parent.parent
README_PATH = DEEPLOCK_PATH / 'README.md'


class TestDocumentationConsistency:
    """Tests to verify documentation matches implementation."""

    def test_readme_exists(self):
        """Verify README.md exists in deeplock."""
        assert README_PATH.exists(), "README.md must exist"

    def test_readme_names_every_action(self):
        """Verify README documents every LockAction value."""
        from deeplock.lock_types import LockAction

        content = README_PATH.read_text()
        for action in LockAction:
            assert f"`{action.value}`" in content, f"README must document {action.value}"

    def test_readme_documents_default_action(self):
        """Verify README states the default action."""
        from deeplock.constants import DEFAULT_ACTION_NAME

        content = README_PATH.read_text()
        assert f"means `{DEFAULT_ACTION_NAME}`" in content

    def test_readme_lists_all_modules(self):
        """Verify README lists every implementation module."""
        content = README_PATH.read_text()

        modules = sorted(
            py_file.name for py_file in DEEPLOCK_PATH.glob('*.py')
            if py_file.name != '__init__.py'
        )

        for module in modules:
            assert module in content, f"README must document {module}"

    def test_readme_names_every_error(self):
        """Verify README mentions the errors callers catch."""
        content = README_PATH.read_text()

        for name in ('InvalidActionError', 'UnlockableObjectError', 'LockViolationError'):
            assert name in content, f"README must document {name}"


class TestPermissionMatrixDocumentationMatch:
    """Verify the README permission matrix matches LockAction.allows."""

    def _matrix_rows(self):
        rows = {}
        for line in README_PATH.read_text().splitlines():
            cells = [cell.strip() for cell in line.strip().strip('|').split('|')]
            if len(cells) == 5 and cells[0].startswith('`'):
                rows[cells[0].strip('`')] = cells[1:]
        return rows

    def test_matrix_has_a_row_per_action(self):
        """Verify every action has a matrix row."""
        from deeplock.lock_types import LockAction

        assert set(self._matrix_rows()) == {action.value for action in LockAction}

    def test_matrix_matches_permissions(self):
        """Verify each cell matches LockAction.allows."""
        from deeplock.lock_types import LockAction, Permission

        order = [Permission.ADD, Permission.MODIFY, Permission.DELETE, Permission.RECONFIGURE]
        for name, cells in self._matrix_rows().items():
            action = LockAction(name)
            for permission, cell in zip(order, cells):
                assert (cell == '+') == action.allows(permission), \
                    f"README matrix disagrees for {name} {permission.name}"
