"""
Property-based tests for diff position mapping.

Property: Every added or context line maps back to its own diff position
"""

from hypothesis import given, strategies as st

from ai_code_reviewer.github.parser import iter_diff_lines, position_of


hunk_bodies = st.lists(
    st.tuples(st.sampled_from(["+", "-", " "]), st.text(alphabet="abc xyz();=", max_size=20)),
    min_size=1,
    max_size=40,
)


def build_patch(start, body):
    old_count = sum(1 for kind, _ in body if kind != "+")
    new_count = sum(1 for kind, _ in body if kind != "-")
    lines = [f"@@ -{start},{old_count} +{start},{new_count} @@"]
    lines.extend(kind + text for kind, text in body)
    return "\n".join(lines)


class TestDiffPositionProperties:
    """Property tests for position_of()."""

    @given(start=st.integers(min_value=1, max_value=1000), body=hunk_bodies)
    def test_new_lines_map_to_positions(self, start, body):
        """
        Property: New-file lines resolve to the position of their diff line.

        Given: A single-hunk patch of random added, removed and context lines
        When: Each new-file line is looked up
        Then: The position points at that exact added or context line
        """
        patch = build_patch(start, body)
        diff_lines = patch.split("\n")

        new_line = start
        for index, (kind, text) in enumerate(body):
            position = index + 2
            if kind == "-":
                continue
            assert position_of(patch, new_line) == position
            assert diff_lines[position - 1] == kind + text
            new_line += 1

    @given(start=st.integers(min_value=1, max_value=1000), body=hunk_bodies)
    def test_lines_outside_hunk_unmapped(self, start, body):
        """
        Property: Lines outside the hunk have no position.

        Given: A single-hunk patch
        When: Lines before and after the hunk range are looked up
        Then: No position is returned
        """
        patch = build_patch(start, body)
        new_count = sum(1 for kind, _ in body if kind != "-")

        assert position_of(patch, start + new_count) is None
        if start > 1:
            assert position_of(patch, start - 1) is None

    @given(start=st.integers(min_value=1, max_value=1000), body=hunk_bodies)
    def test_every_line_counted(self, start, body):
        """
        Property: Positions are consecutive over every diff line.

        Given: A single-hunk patch
        When: It is walked
        Then: Positions run from 1 to the line count, removed lines included
        """
        patch = build_patch(start, body)

        positions = [line.position for line in iter_diff_lines(patch)]
        assert positions == list(range(1, len(body) + 2))
