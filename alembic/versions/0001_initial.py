"""Initial schema: accounts, profiles, match requests, feed history, chat

Revision ID: 0001_initial
Revises: 
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # 1. Users
    op.create_table('users',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('twitch_id', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    # 2. Creators
    op.create_table('creators',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('display_name', sa.String(length=255), nullable=False),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('what_stream', sa.Text(), nullable=True),
        sa.Column('want_editor', sa.Text(), nullable=True),
        sa.Column('content_type', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_creators_user_id'), 'creators', ['user_id'], unique=True)
    op.create_index(op.f('ix_creators_content_type'), 'creators', ['content_type'], unique=False)

    op.create_table('creator_preferred_styles',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('creator_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('style_name', sa.String(length=100), nullable=False),
        sa.ForeignKeyConstraint(['creator_id'], ['creators.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('creator_id', 'style_name', name='uq_creator_style')
    )
    op.create_index(op.f('ix_creator_preferred_styles_creator_id'), 'creator_preferred_styles', ['creator_id'], unique=False)

    # 3. Editors, tags and clips
    op.create_table('editors',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('anonymous_name', sa.String(length=255), nullable=False),
        sa.Column('real_name', sa.String(length=255), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('availability', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_editors_user_id'), 'editors', ['user_id'], unique=True)

    op.create_table('editor_tags',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('editor_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('tag_name', sa.String(length=100), nullable=False),
        sa.Column('tag_type', sa.String(length=20), nullable=False),
        sa.ForeignKeyConstraint(['editor_id'], ['editors.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('editor_id', 'tag_type', 'tag_name', name='uq_editor_tag')
    )
    op.create_index(op.f('ix_editor_tags_editor_id'), 'editor_tags', ['editor_id'], unique=False)
    op.create_index('ix_editor_tags_type_name', 'editor_tags', ['tag_type', 'tag_name'], unique=False)

    op.create_table('editor_clips',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('editor_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('file_path', sa.String(length=500), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('order_index', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['editor_id'], ['editors.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_editor_clips_editor_id'), 'editor_clips', ['editor_id'], unique=False)

    # 4. Match requests
    op.create_table('match_requests',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('creator_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('editor_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('clip_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('creator_liked_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('editor_accepted_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('final_matched_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['creator_id'], ['creators.id']),
        sa.ForeignKeyConstraint(['editor_id'], ['editors.id']),
        sa.ForeignKeyConstraint(['clip_id'], ['editor_clips.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_match_requests_creator_id'), 'match_requests', ['creator_id'], unique=False)
    op.create_index(op.f('ix_match_requests_editor_id'), 'match_requests', ['editor_id'], unique=False)
    op.create_index('ix_match_requests_editor_status', 'match_requests', ['editor_id', 'status'], unique=False)
    op.create_index('ix_match_requests_creator_status', 'match_requests', ['creator_id', 'status'], unique=False)
    # At most one live request per pair
    op.create_index(
        'uq_match_requests_live_pair', 'match_requests', ['creator_id', 'editor_id'],
        unique=True,
        postgresql_where=sa.text("status IN ('pending', 'accepted', 'matched')"),
    )

    # 5. Feed history
    op.create_table('feed_history',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('creator_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('editor_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('clip_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('action', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['creator_id'], ['creators.id']),
        sa.ForeignKeyConstraint(['editor_id'], ['editors.id']),
        sa.ForeignKeyConstraint(['clip_id'], ['editor_clips.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_feed_history_creator_id'), 'feed_history', ['creator_id'], unique=False)

    # 6. Chat
    op.create_table('chat_messages',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('match_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('sender_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('read', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['match_id'], ['match_requests.id']),
        sa.ForeignKeyConstraint(['sender_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_chat_messages_match_created', 'chat_messages', ['match_id', 'created_at'], unique=False)
    op.create_index('ix_chat_messages_match_unread', 'chat_messages', ['match_id', 'sender_id', 'read'], unique=False)


def downgrade() -> None:
    op.drop_table('chat_messages')
    op.drop_table('feed_history')
    op.drop_table('match_requests')
    op.drop_table('editor_clips')
    op.drop_table('editor_tags')
    op.drop_table('editors')
    op.drop_table('creator_preferred_styles')
    op.drop_table('creators')
    op.drop_table('users')
