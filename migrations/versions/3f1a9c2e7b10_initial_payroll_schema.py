"""initial payroll schema (companies, people, attendance, salary, payroll runs)

Revision ID: 3f1a9c2e7b10
Revises:
Create Date: 2026-01-05 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2e7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PAYROLL_STATUSES = ('DRAFT', 'PROCESSING', 'COMPLETED', 'PAID')


def _money(name):
    return sa.Column(name, sa.Numeric(14, 2), nullable=False, server_default='0')


def _days(name):
    return sa.Column(name, sa.Numeric(5, 1), nullable=False, server_default='0')


def upgrade() -> None:
    op.create_table(
        'companies',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(length=50), nullable=False, unique=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('address', sa.String(length=255)),
        sa.Column('city', sa.String(length=120)),
        sa.Column('state', sa.String(length=120)),
        sa.Column('working_days', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('deleted_at', sa.DateTime(timezone=True)),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_table(
        'roles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(length=50), nullable=False, unique=True),
    )
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id', ondelete='SET NULL')),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=20)),
        sa.Column('created_at', sa.DateTime()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_company_id', 'users', ['company_id'])
    op.create_table(
        'user_roles',
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('role_id', sa.Integer(), sa.ForeignKey('roles.id', ondelete='CASCADE'), primary_key=True),
    )
    op.create_table(
        'departments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('company_id', 'name', name='uq_department_company_name'),
    )
    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('department_id', sa.Integer(), sa.ForeignKey('departments.id', ondelete='RESTRICT')),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), unique=True),
        sa.Column('code', sa.String(length=32), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False, unique=True),
        sa.Column('first_name', sa.String(length=80), nullable=False),
        sa.Column('last_name', sa.String(length=80)),
        sa.Column('designation', sa.String(length=120)),
        sa.Column('joining_date', sa.Date()),
        sa.Column('bank_name', sa.String(length=120)),
        sa.Column('bank_account_no', sa.String(length=40)),
        sa.Column('pan_number', sa.String(length=20)),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='ACTIVE'),
        sa.Column('deleted_at', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('company_id', 'code', name='uq_employee_company_code'),
    )
    op.create_index('ix_emp_company_id', 'employees', ['company_id'])
    op.create_index('ix_emp_dept_id', 'employees', ['department_id'])

    op.create_table(
        'holidays',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('is_optional', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('company_id', 'date', name='uq_holiday_company_date'),
    )
    op.create_index('ix_holidays_company_id', 'holidays', ['company_id'])
    op.create_table(
        'attendance_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='PRESENT'),
        sa.Column('check_in', sa.DateTime()),
        sa.Column('check_out', sa.DateTime()),
        sa.Column('notes', sa.String(length=255)),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime()),
        sa.UniqueConstraint('employee_id', 'date', name='uq_attendance_employee_date'),
    )
    op.create_index('ix_attendance_logs_employee_id', 'attendance_logs', ['employee_id'])
    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(length=40), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('data', sa.JSON()),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])

    op.create_table(
        'salary_structures',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False, unique=True),
        _money('basic_salary'), _money('hra'), _money('da'), _money('ta'),
        _money('special_allowance'), _money('medical_allowance'),
        sa.Column('other_allowances', sa.JSON(), nullable=False),
        _money('pf'), _money('esi'), _money('professional_tax'), _money('tds'),
        sa.Column('other_deductions', sa.JSON(), nullable=False),
        _money('gross_salary'), _money('net_salary'), _money('ctc'),
        sa.Column('effective_from', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
    )

    run_status = sa.Enum(*PAYROLL_STATUSES, name='payroll_status_enum')
    item_status = sa.Enum(*PAYROLL_STATUSES, name='payroll_item_status_enum')
    op.create_table(
        'payroll_runs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('period_start', sa.Date(), nullable=False),
        sa.Column('period_end', sa.Date(), nullable=False),
        sa.Column('status', run_status, nullable=False, server_default='DRAFT'),
        sa.Column('total_employees', sa.Integer(), nullable=False, server_default='0'),
        _money('total_gross'), _money('total_deductions'), _money('total_net'),
        sa.Column('processed_by', sa.Integer(), sa.ForeignKey('users.id')),
        sa.Column('processed_at', sa.DateTime()),
        sa.Column('paid_at', sa.DateTime()),
        sa.Column('notes', sa.Text()),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id')),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
        sa.UniqueConstraint('company_id', 'month', 'year', name='uq_payroll_run_company_period'),
    )
    op.create_index('ix_payroll_runs_company_id', 'payroll_runs', ['company_id'])
    op.create_table(
        'payroll_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('payroll_run_id', sa.Integer(), sa.ForeignKey('payroll_runs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('total_working_days', sa.Integer(), nullable=False, server_default='0'),
        _days('days_present'), _days('days_absent'), _days('paid_leave_days'), _days('unpaid_leave_days'),
        _money('basic_salary'), _money('hra'), _money('da'), _money('ta'), _money('special_allowance'),
        _money('gross_earnings'),
        _money('pf'), _money('esi'), _money('professional_tax'), _money('tds'), _money('lop_deduction'),
        _money('total_deductions'), _money('net_salary'),
        _money('base_gross_earnings'), _money('base_total_deductions'),
        _money('overtime_pay'), _money('bonus'),
        sa.Column('other_earnings', sa.JSON(), nullable=False),
        sa.Column('other_deductions', sa.JSON(), nullable=False),
        sa.Column('status', item_status, nullable=False, server_default='DRAFT'),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
        sa.UniqueConstraint('payroll_run_id', 'employee_id', name='uq_payroll_item_run_employee'),
    )
    op.create_index('ix_payroll_items_payroll_run_id', 'payroll_items', ['payroll_run_id'])
    op.create_index('ix_payroll_items_employee_id', 'payroll_items', ['employee_id'])


def downgrade() -> None:
    for table in ('payroll_items', 'payroll_runs', 'salary_structures', 'notifications',
                  'attendance_logs', 'holidays', 'employees', 'departments',
                  'user_roles', 'users', 'roles', 'companies'):
        op.drop_table(table)

    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        sa.Enum(name='payroll_item_status_enum').drop(bind, checkfirst=True)
        sa.Enum(name='payroll_status_enum').drop(bind, checkfirst=True)
